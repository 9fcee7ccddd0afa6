"""
cg_payment.py
Optional x402 payment gate in front of the CoinGecko HTTP routes.
Enabled only when both FACILITATOR_URL and ADDRESS are configured.
"""
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import compile_path

from cg_catalog import NEW_COINS, SIMPLE_PRICE, TOKEN_BY_ADDRESS, TRENDING_COINS
from cg_settings import DEFAULT_NETWORK, Settings

logger = logging.getLogger("cg_payment")

CallNext = Callable[[Request], Awaitable[Response]]
Guard = Callable[[Request, CallNext], Awaitable[Response]]


@dataclass(frozen=True)
class PaymentRule:
    tool: str
    method: str
    path: str
    price: str
    network: str = DEFAULT_NETWORK
    description: str = ""

    @property
    def route_key(self) -> str:
        return f"{self.method} {self.path}"


PAYMENT_RULES: Tuple[PaymentRule, ...] = (
    PaymentRule(SIMPLE_PRICE.name, "GET", SIMPLE_PRICE.http_path, "$0.001", description=SIMPLE_PRICE.summary),
    PaymentRule(TRENDING_COINS.name, "GET", TRENDING_COINS.http_path, "$0.001", description=TRENDING_COINS.summary),
    PaymentRule(NEW_COINS.name, "GET", NEW_COINS.http_path, "$0.001", description=NEW_COINS.summary),
    PaymentRule(TOKEN_BY_ADDRESS.name, "GET", TOKEN_BY_ADDRESS.http_path, "$0.002", description=TOKEN_BY_ADDRESS.summary),
)


def x402_guard(rule: PaymentRule, pay_to: str, facilitator_url: str) -> Guard:
    """Build the x402 middleware callable that settles payment for ``rule``."""
    from x402.fastapi.middleware import require_payment

    return require_payment(
        price=rule.price,
        pay_to_address=pay_to,
        description=rule.description,
        mime_type="application/json",
        network=rule.network,
        facilitator_config={"url": facilitator_url},
    )


GuardFactory = Callable[[PaymentRule, str, str], Guard]


class PaymentGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, routes: List[Tuple[str, "re.Pattern[str]", Guard]]):
        super().__init__(app)
        self.routes = routes

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        for method, regex, guard in self.routes:
            if request.method == method and regex.match(request.url.path):
                logger.debug("payment required for %s %s", method, request.url.path)
                return await guard(request, call_next)
        return await call_next(request)


class PaymentGate:
    """Payment state fixed at construction: enabled or disabled for the process lifetime."""

    def __init__(
        self,
        settings: Settings,
        rules: Tuple[PaymentRule, ...] = PAYMENT_RULES,
        guard_factory: Optional[GuardFactory] = None,
    ):
        self.enabled = settings.payment_enabled
        self.facilitator_url = settings.facilitator_url
        self.pay_to = settings.pay_to
        self.network = settings.network
        self.rules = tuple(
            PaymentRule(r.tool, r.method, r.path, r.price, settings.network, r.description) for r in rules
        )
        self.guard_factory = guard_factory or x402_guard

    def compiled_routes(self) -> List[Tuple[str, "re.Pattern[str]", Guard]]:
        routes = []
        for rule in self.rules:
            regex, _, _ = compile_path(rule.path)
            routes.append((rule.method, regex, self.guard_factory(rule, self.pay_to, self.facilitator_url)))
        return routes

    def install(self, app) -> bool:
        if not self.enabled:
            logger.warning("Payment not configured. Set FACILITATOR_URL and ADDRESS to enable it")
            logger.warning("Server will run without payment requirements")
            return False
        app.add_middleware(PaymentGateMiddleware, routes=self.compiled_routes())
        logger.info("Payment middleware enabled on %s for %s", self.network, ", ".join(r.route_key for r in self.rules))
        return True

    def pricing(self) -> Optional[Dict[str, str]]:
        if not self.enabled:
            return None
        return {rule.tool: rule.price for rule in self.rules}
