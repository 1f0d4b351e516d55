from app.config import RUPIAH_PER_COIN
from tools.finance.services import FinanceServices
from tools.responses import tool_response
from tools.schemas import AddBalanceInput


def make_add_balance(services: FinanceServices):

    def add_balance(data: AddBalanceInput, caller_id: str):
        wallet = services.wallets.add_balance(caller_id, data.amount)

        # 1 coin per RUPIAH_PER_COIN topped up, remainder is dropped
        coins_added = int(data.amount // RUPIAH_PER_COIN)
        if coins_added > 0:
            wallet = services.wallets.add_coins(caller_id, coins_added)

        return tool_response(
            success=True,
            data=wallet,
            message="Balance added",
            meta={
                "amount": data.amount,
                "coins_added": coins_added,
            }
        )

    return add_balance
