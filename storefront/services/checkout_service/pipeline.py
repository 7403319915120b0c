import structlog

from storefront.core.observability import storefront_checkout_step_failures_total

logger = structlog.get_logger(__name__)


class CheckoutSuspended(Exception):
    """Raised by a step when the caller must supply data before checkout can go on."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(status)


class PipelineStep:
    def __init__(self, name, action):
        self.name = name
        self.action = action


class CheckoutPipeline:
    """Runs named async steps in order over a shared context dict.

    There are no compensations: steps before order creation have no durable
    effects apart from the billing address, which is kept on failure.
    """

    def __init__(self):
        self.steps = []

    def add_step(self, name: str, action):
        """Builder pattern to add a step."""
        self.steps.append(PipelineStep(name, action))
        return self

    async def execute(self, ctx: dict):
        """Executes steps sequentially; the first exception stops the run."""
        for step in self.steps:
            try:
                await step.action(ctx)
            except CheckoutSuspended as suspended:
                logger.info("checkout suspended", step=step.name, status=suspended.status)
                raise
            except Exception as e:
                logger.error("checkout step failed", step=step.name, error=type(e).__name__)
                storefront_checkout_step_failures_total.labels(step_name=step.name).inc()
                raise
            ctx.setdefault("completed_steps", []).append(step.name)
        return ctx
