"""
Paywall page served to browsers instead of a raw 402 body
"""

import html
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from x402.types import PaymentRequirements


@dataclass
class PaywallConfig:
    """Branding shown on the paywall page"""

    app_name: str | None = None
    app_logo: str | None = None


_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Payment Required</title>
</head>
<body>
<main id="x402-paywall">
<h1>Payment Required</h1>
<p>{description}</p>
<p>Amount: <strong>${amount}</strong> USDC on {network}</p>
</main>
</body>
</html>
"""


def is_browser_request(accept: str | None, user_agent: str | None) -> bool:
    """True for interactive browsers: HTML accepted and a Mozilla user agent."""
    return "text/html" in (accept or "") and "Mozilla" in (user_agent or "")


def _inject_config(page: str, config: dict[str, Any]) -> str:
    payload = json.dumps(config).replace("</", "<\\/")
    script = f"<script>window.x402 = {payload};</script>"
    if "</head>" in page:
        return page.replace("</head>", script + "\n</head>", 1)
    return script + page


def render_paywall_html(
    amount: Decimal,
    requirements: list[PaymentRequirements],
    current_url: str,
    testnet: bool,
    config: PaywallConfig | None = None,
    custom_html: str | None = None,
) -> str:
    """Render the paywall page with ``window.x402`` payment configuration.

    *custom_html* replaces the built-in template; the configuration script is
    injected into it the same way.
    """
    config = config or PaywallConfig()
    first = requirements[0] if requirements else None
    page = custom_html or _TEMPLATE.format(
        description=html.escape(first.description if first and first.description else current_url),
        amount=html.escape(str(amount)),
        network=html.escape(first.network if first else ""),
    )
    return _inject_config(
        page,
        {
            "amount": float(amount),
            "paymentRequirements": [r.model_dump(by_alias=True, exclude_none=True) for r in requirements],
            "testnet": testnet,
            "currentUrl": current_url,
            "config": {"appName": config.app_name, "appLogo": config.app_logo},
        },
    )
