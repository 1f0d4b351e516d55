"""
Report Tool Handler

Tools:
- generate_report: Weekly, monthly or yearly income/spending summary.
  The result is structured data; rendering it is left to the caller.
"""

import datetime as dt
from typing import Optional, Tuple

from tools.finance.services import FinanceServices, PeriodSummary
from tools.responses import tool_response
from tools.schemas import GenerateReportInput
from tools.time.dates import period_window


def report_window(
    data: GenerateReportInput,
    today: Optional[dt.date] = None
) -> Tuple[dt.date, dt.date, str]:
    """
    Half-open window and period label of a report.

    Returns:
        (start, end, period) where period is "2026-03", "2026" or the
        ISO date of the first day of the week
    """
    today = today or dt.date.today()

    if data.report_type == "WEEKLY":
        if data.week_start_date:
            start = data.week_start_date
            end = start + dt.timedelta(days=7)
        else:
            start, end = period_window("WEEKLY", today)
        return start, end, start.isoformat()

    year = data.year or today.year

    if data.report_type == "YEARLY":
        start, end = period_window("YEARLY", dt.date(year, 1, 1))
        return start, end, str(year)

    month = data.month or today.month
    start, end = period_window("MONTHLY", dt.date(year, month, 1))
    return start, end, f"{year}-{month:02d}"


def savings_rate(summary: PeriodSummary) -> float:
    """Share of income left after spending, in percent (0 without income)"""
    if summary.total_income <= 0:
        return 0.0
    return round(summary.net_amount / summary.total_income * 100, 1)


def make_generate_report(services: FinanceServices):

    def generate_report(data: GenerateReportInput, caller_id: str):
        start, end, period = report_window(data)
        summary = services.reports.summarize(caller_id, start, end)

        top = summary.expenses_by_category[0] if summary.expenses_by_category else None

        return tool_response(
            success=True,
            data=summary,
            message=f"{data.report_type.capitalize()} report for {period}",
            meta={
                "report_type": data.report_type,
                "period": period,
                "transaction_count": summary.expense_count + summary.income_count,
                "top_category": top.category_name if top else None,
                "savings_rate": savings_rate(summary),
            }
        )

    return generate_report
