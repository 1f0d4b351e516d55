from tools.finance.categories import guess_income_category
from tools.finance.services import FinanceServices
from tools.responses import tool_response
from tools.schemas import CreateIncomeInput


def make_create_income(services: FinanceServices):

    def create_income(data: CreateIncomeInput, caller_id: str):
        category_auto = data.category is None
        category_name = data.category or guess_income_category(data.description)
        category = services.categories.find_or_create(caller_id, category_name, "INCOME")

        income = services.incomes.create_income(caller_id, {
            "amount": data.amount,
            "description": data.description,
            "category_id": category.id,
            "date": data.date,
        })

        return tool_response(
            success=True,
            data=income,
            message=f"Income recorded: {data.description}",
            meta={
                "transaction_id": income.id,
                "category_name": category.name,
                "category_auto": category_auto,
            }
        )

    return create_income
