"""
Voucher Tool Handler

Tools:
- redeem_voucher: Consume a voucher code and credit its benefit to the
  caller's wallet
"""

import datetime as dt

from tools.finance.services import FinanceServices, Voucher, VoucherAlreadyUsedError, Wallet
from tools.responses import tool_failure, tool_response
from tools.schemas import RedeemVoucherInput, ToolError


def _apply_benefit(services: FinanceServices, voucher: Voucher, caller_id: str) -> Wallet:
    if voucher.type == "COINS":
        return services.wallets.add_coins(caller_id, int(voucher.value))
    if voucher.type == "BALANCE":
        return services.wallets.add_balance(caller_id, voucher.value)
    # DISCOUNT vouchers are only marked as redeemed
    return services.wallets.get_wallet(caller_id)


def make_redeem_voucher(services: FinanceServices):

    def redeem_voucher(data: RedeemVoucherInput, caller_id: str):
        code = data.voucher_code
        voucher = services.vouchers.get_voucher(code)

        if voucher is None:
            return tool_failure(
                ToolError.VOUCHER_INVALID,
                "Voucher code is invalid or expired",
                meta={"voucher_code": code}
            )

        if voucher.is_used:
            return tool_failure(ToolError.VOUCHER_ALREADY_USED, "Voucher has already been used")

        if voucher.expires_at and voucher.expires_at < dt.datetime.now():
            return tool_failure(ToolError.VOUCHER_EXPIRED, "Voucher has expired")

        try:
            voucher = services.vouchers.redeem_voucher(code, caller_id)
        except VoucherAlreadyUsedError:
            return tool_failure(ToolError.VOUCHER_ALREADY_USED, "Voucher has already been used")

        wallet = _apply_benefit(services, voucher, caller_id)

        return tool_response(
            success=True,
            data={"voucher": voucher, "wallet": wallet},
            message=f"Voucher {code} redeemed successfully",
            meta={
                "transaction_id": voucher.id,
                "voucher_type": voucher.type,
                "value": voucher.value,
            }
        )

    return redeem_voucher
