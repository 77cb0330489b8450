"""Weekly financial digest - aggregation and email formatting"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from html import escape
from typing import Dict, Iterable, List

from runway_guard.domain.burn import calculate_burn_rate
from runway_guard.domain.models import (
    DigestInsight,
    FormattedDigest,
    Severity,
    ThresholdAlert,
    Transaction,
    VendorTotal,
    WeeklyDigestData,
    to_decimal,
)
from runway_guard.domain.runway import runway_from_burn
from runway_guard.utils.date_utils import add_months

TOP_VENDOR_LIMIT = 5
DIVIDER = "━" * 35
FOOTER = "Runway Guard - Your Financial Autopilot"


def build_weekly_digest(
    company_name: str,
    transactions: Iterable[Transaction],
    current_cash: Decimal,
    alerts: Iterable[ThresholdAlert],
    week_end: date,
) -> WeeklyDigestData:
    """
    Summarize the week ending on `week_end` (inclusive).

    Burn and runway use the trailing 3 months; burn change compares the
    trailing month with the month before it; vendor totals cover the week only.
    """
    txns = list(transactions)
    cash = to_decimal(current_cash)
    window_end = week_end + timedelta(days=1)
    week_start = week_end - timedelta(days=6)

    burn = calculate_burn_rate(txns, add_months(window_end, -3), window_end)
    runway = runway_from_burn(cash, burn.net_burn, week_end)

    one_month_ago = add_months(window_end, -1)
    this_month = calculate_burn_rate(txns, one_month_ago, window_end).net_burn
    last_month = calculate_burn_rate(txns, add_months(window_end, -2), one_month_ago).net_burn
    burn_change = float((this_month - last_month) / abs(last_month) * 100) if last_month else 0.0

    vendor_totals: Dict[str, Decimal] = defaultdict(Decimal)
    for txn in txns:
        if txn.is_debit and txn.vendor_normalized and week_start <= txn.date <= week_end:
            vendor_totals[txn.vendor_normalized] += abs(txn.amount)
    top_vendors = sorted(vendor_totals.items(), key=lambda item: item[1], reverse=True)[:TOP_VENDOR_LIMIT]

    return WeeklyDigestData(
        company_name=company_name,
        current_cash=cash,
        runway_months=None if runway.is_indefinite else runway.runway_months,
        monthly_burn=burn.net_burn,
        burn_change=burn_change,
        insights=[DigestInsight(type=a.type.value, message=a.message, severity=a.severity) for a in alerts],
        top_vendors=[VendorTotal(name=name, amount=amount) for name, amount in top_vendors],
        week_start_date=week_start,
        week_end_date=week_end,
    )


def format_currency(amount: Decimal) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def format_short_date(day: date) -> str:
    return f"{day.strftime('%b')} {day.day}"


def _runway_text(data: WeeklyDigestData) -> str:
    if data.runway_months is None:
        return "∞ (profitable)"
    return f"{data.runway_months:.1f} months"


def _burn_change_text(change: float) -> str:
    return f"↑ {change:.1f}%" if change >= 0 else f"↓ {abs(change):.1f}%"


def _burn_change_marker(change: float) -> str:
    if change > 10:
        return "⚠️"
    if change < -10:
        return "✅"
    return "→"


def _by_severity(insights: List[DigestInsight], severity: Severity) -> List[DigestInsight]:
    return [i for i in insights if Severity(i.severity) == severity]


SECTIONS = (
    (Severity.CRITICAL, "🚨 CRITICAL ALERTS", "🚨 Critical Alerts"),
    (Severity.WARNING, "⚠️ NEEDS ATTENTION", "⚠️ Needs Attention"),
    (Severity.INFO, "ℹ️ INSIGHTS", "ℹ️ Insights"),
)


def format_weekly_digest(data: WeeklyDigestData, dashboard_url: str) -> FormattedDigest:
    """Render the digest as subject, plain-text body and HTML body"""
    runway_text = _runway_text(data)
    burn_change_text = _burn_change_text(data.burn_change)
    period = f"{format_short_date(data.week_start_date)} - {format_short_date(data.week_end_date)}"
    vendors = data.top_vendors[:TOP_VENDOR_LIMIT]

    subject = (
        f"Weekly Financial Digest: {runway_text} runway, "
        f"{format_currency(data.monthly_burn)}/mo burn"
    )

    lines = [
        f"{data.company_name} - Weekly Financial Summary",
        period,
        "",
        DIVIDER,
        "",
        "📊 KEY METRICS",
        "",
        f"  Cash Position: {format_currency(data.current_cash)}",
        f"  Runway: {runway_text}",
        f"  Monthly Burn: {format_currency(data.monthly_burn)} "
        f"{_burn_change_marker(data.burn_change)} {burn_change_text}",
        "",
        DIVIDER,
    ]

    for severity, heading, _ in SECTIONS:
        items = _by_severity(data.insights, severity)
        if items:
            lines += ["", heading, ""]
            lines += [f"  • {i.message}" for i in items]

    if vendors:
        lines += ["", DIVIDER, "", "💰 TOP VENDORS THIS WEEK", ""]
        lines += [f"  {n}. {v.name}: {format_currency(v.amount)}" for n, v in enumerate(vendors, start=1)]

    lines += [
        "",
        DIVIDER,
        "",
        f"View full dashboard: {dashboard_url}",
        "",
        "—",
        FOOTER,
        "To unsubscribe, update your notification settings in the app.",
    ]
    body = "\n".join(lines) + "\n"

    return FormattedDigest(
        subject=subject,
        body=body,
        html=_render_html(data, period, runway_text, burn_change_text, vendors, dashboard_url),
    )


def _render_html(
    data: WeeklyDigestData,
    period: str,
    runway_text: str,
    burn_change_text: str,
    vendors: List[VendorTotal],
    dashboard_url: str,
) -> str:
    burn_class = "burn-up" if data.burn_change >= 0 else "burn-down"

    sections = []
    for severity, _, heading in SECTIONS:
        items = _by_severity(data.insights, severity)
        if items:
            rows = "".join(f'<div class="alert-{severity.value}">{escape(i.message)}</div>' for i in items)
            sections.append(f'<div class="section"><div class="section-title">{heading}</div>{rows}</div>')

    if vendors:
        rows = "".join(
            f"<li><span>{escape(v.name)}</span><span><strong>{format_currency(v.amount)}</strong></span></li>"
            for v in vendors
        )
        sections.append(
            '<div class="section"><div class="section-title">💰 Top Vendors This Week</div>'
            f'<ul class="vendor-list">{rows}</ul></div>'
        )

    sections_html = "".join(sections)

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Weekly Financial Digest</title>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #1a1a1a; max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: #111; color: #fff; padding: 24px; border-radius: 8px 8px 0 0; }}
    .metrics {{ display: grid; grid-template-columns: repeat(3, 1fr); gap: 16px; padding: 24px; background: #f8f8f8; }}
    .metric {{ text-align: center; }}
    .metric-value {{ font-size: 24px; font-weight: 700; }}
    .metric-label {{ font-size: 12px; color: #666; text-transform: uppercase; }}
    .section {{ padding: 20px 24px; border-bottom: 1px solid #eee; }}
    .section-title {{ font-size: 14px; font-weight: 600; color: #666; margin-bottom: 12px; }}
    .alert-critical {{ background: #fef2f2; border-left: 4px solid #dc2626; padding: 12px; margin: 8px 0; }}
    .alert-warning {{ background: #fffbeb; border-left: 4px solid #f59e0b; padding: 12px; margin: 8px 0; }}
    .alert-info {{ background: #eff6ff; border-left: 4px solid #3b82f6; padding: 12px; margin: 8px 0; }}
    .vendor-list {{ list-style: none; padding: 0; margin: 0; }}
    .vendor-list li {{ display: flex; justify-content: space-between; padding: 8px 0; border-bottom: 1px solid #eee; }}
    .footer {{ padding: 24px; text-align: center; color: #666; font-size: 12px; }}
    .burn-up {{ color: #dc2626; }}
    .burn-down {{ color: #16a34a; }}
  </style>
</head>
<body>
  <div class="header">
    <h1>{escape(data.company_name)}</h1>
    <p>Weekly Financial Summary • {period}</p>
  </div>
  <div class="metrics">
    <div class="metric"><div class="metric-value">{format_currency(data.current_cash)}</div><div class="metric-label">Cash Position</div></div>
    <div class="metric"><div class="metric-value">{runway_text}</div><div class="metric-label">Runway</div></div>
    <div class="metric"><div class="metric-value">{format_currency(data.monthly_burn)}</div><div class="metric-label">Monthly Burn <span class="{burn_class}">{burn_change_text}</span></div></div>
  </div>
  {sections_html}
  <div class="footer">
    <a href="{escape(dashboard_url, quote=True)}">View Full Dashboard</a>
    <p>{FOOTER}</p>
    <p>To unsubscribe, update your notification settings in the app.</p>
  </div>
</body>
</html>
"""
