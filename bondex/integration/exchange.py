"""
Token exchange service (imperative shell around the pure kernels).

- Resolves token identity and market parameters through the registry.
- Prices trades with `core.curve` and `core.fees`.
- Moves reserve asset, vault principal and token supply through collaborators.
- Stages escrow records with `core.escrow` and commits them last.

Every public operation runs under one process-wide lock and inside an
`atomic()` journal: if any collaborator call fails, every journaled participant
is restored and the error propagates unchanged.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

from ..core import curve, escrow, uint
from ..core.errors import (
    AlreadyInitialized,
    ExchangeError,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    LedgerInvariantError,
    NotAuthorized,
    NotInitialized,
    SlippageExceeded,
    TransferFailed,
    UnknownMarket,
    UnknownToken,
)
from ..core.escrow import TokenExchangeInfo
from ..core.fees import CostAndPriceAmounts, costs_for_buying, prices_for_selling
from ..core.invariants import check_transition
from ..core.types import Event, ExchangeEvent, MarketParams, TradeResult
from ..logging_config import get_exchange_logger
from ..state.canonical import canonical_address
from ..state.ledger import EscrowLedger
from ..state.state_root import compute_ledger_root
from ..state.withdrawers import WithdrawerTable
from .config import ExchangeConfig
from .interfaces import Registry, ReserveAsset, TokenLedger, Vault
from .journal import atomic

logger = get_exchange_logger(__name__)


@dataclass(frozen=True)
class ExchangeSettings:
    """References fixed by `initialize` for the lifetime of the deployment."""

    owner: str
    fee_recipient: str
    registry: Registry
    tokens: TokenLedger
    vault: Vault
    reserve: ReserveAsset
    attribute_trades_to_escrow: bool = True


def _require_amount(amount: int) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidAmount(f"amount must be a positive int, got {amount!r}")
    return uint.require_uint(amount, "amount")


class TokenExchange:
    """Bonding-curve exchange with per-token interest escrow."""

    def __init__(self, address: str) -> None:
        self.address = canonical_address(address, name="exchange")
        self._settings: Optional[ExchangeSettings] = None
        self._ledger = EscrowLedger()
        self._withdrawers = WithdrawerTable()
        self._events: List[ExchangeEvent] = []
        self._lock = threading.RLock()

    # -- initialization ------------------------------------------------------

    def initialize(
        self,
        owner: str,
        fee_recipient: str,
        registry: Registry,
        tokens: TokenLedger,
        vault: Vault,
        reserve: ReserveAsset,
        *,
        attribute_trades_to_escrow: bool = True,
    ) -> None:
        with self._lock:
            if self._settings is not None:
                raise AlreadyInitialized("exchange already initialized")
            self._settings = ExchangeSettings(
                owner=canonical_address(owner, name="owner"),
                fee_recipient=canonical_address(fee_recipient, name="fee_recipient"),
                registry=registry,
                tokens=tokens,
                vault=vault,
                reserve=reserve,
                attribute_trades_to_escrow=attribute_trades_to_escrow,
            )
            logger.info(
                "exchange_initialized",
                exchange=self.address,
                owner=self._settings.owner,
                fee_recipient=self._settings.fee_recipient,
                attribute_trades_to_escrow=attribute_trades_to_escrow,
            )

    def initialize_from_config(
        self,
        config: ExchangeConfig,
        registry: Registry,
        tokens: TokenLedger,
        vault: Vault,
        reserve: ReserveAsset,
    ) -> None:
        self.initialize(
            config.owner,
            config.fee_recipient,
            registry,
            tokens,
            vault,
            reserve,
            attribute_trades_to_escrow=config.attribute_trades_to_escrow,
        )

    @property
    def settings(self) -> ExchangeSettings:
        if self._settings is None:
            raise NotInitialized("exchange not initialized")
        return self._settings

    # -- helpers -------------------------------------------------------------

    def _participants(self) -> Tuple[Any, ...]:
        s = self.settings
        return (self._ledger, self._withdrawers, s.registry, s.tokens, s.vault, s.reserve)

    def _resolve(self, token: str) -> Tuple[str, MarketParams]:
        tok = canonical_address(token, name="token")
        identity = self.settings.registry.resolve_token_identity(tok)
        if not identity.exists:
            raise UnknownToken(f"token {tok} does not exist")
        market = self.settings.registry.resolve_market(identity.market_id)
        if not market.exists or market.params is None:
            raise UnknownMarket(f"market {identity.market_id} does not exist")
        return tok, market.params

    def _stage(self, token: str, pre: TokenExchangeInfo, post: TokenExchangeInfo) -> None:
        violations = check_transition(pre, post)
        if violations:
            raise LedgerInvariantError(violations)
        self._ledger.set(token, post)

    def _interest_headroom(self) -> int:
        """Reserve the exchange's vault shares are worth beyond all recorded principal."""
        principal = sum(info.dai_in_token for info in self._ledger.get_all().values())
        held = self.settings.vault.balance_of_underlying(self.address)
        return held - principal if held > principal else 0

    @contextmanager
    def _rejections(self, op: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except ExchangeError as exc:
            logger.warning(f"{op}_rejected", error=type(exc).__name__, reason=str(exc), **context)
            raise

    # -- quotes --------------------------------------------------------------

    def _quote_buy(self, token: str, amount: int) -> CostAndPriceAmounts:
        uint.require_uint(amount, "amount")
        tok, p = self._resolve(token)
        supply = self.settings.tokens.total_supply(tok)
        raw = curve.raw_cost_for_buying(p.base_cost, p.price_rise, p.tokens_per_interval, supply, amount)
        quote = costs_for_buying(raw, p.trading_fee_rate, p.trading_fee_rate_scale)
        logger.debug("buy_quoted", token=tok, amount=amount, supply=supply, total=quote.total)
        return quote

    def _quote_sell(self, token: str, amount: int) -> CostAndPriceAmounts:
        uint.require_uint(amount, "amount")
        tok, p = self._resolve(token)
        supply = self.settings.tokens.total_supply(tok)
        raw = curve.raw_price_for_selling(p.base_cost, p.price_rise, p.tokens_per_interval, supply, amount)
        quote = prices_for_selling(raw, p.trading_fee_rate, p.trading_fee_rate_scale)
        logger.debug("sell_quoted", token=tok, amount=amount, supply=supply, total=quote.total)
        return quote

    def get_costs_for_buying_tokens(self, token: str, amount: int) -> CostAndPriceAmounts:
        with self._lock, self._rejections("quote_buy", token=token, amount=amount):
            return self._quote_buy(token, amount)

    def get_cost_for_buying_tokens(self, token: str, amount: int) -> int:
        return self.get_costs_for_buying_tokens(token, amount).total

    def get_prices_for_selling_tokens(self, token: str, amount: int) -> CostAndPriceAmounts:
        with self._lock, self._rejections("quote_sell", token=token, amount=amount):
            return self._quote_sell(token, amount)

    def get_price_for_selling_tokens(self, token: str, amount: int) -> int:
        return self.get_prices_for_selling_tokens(token, amount).total

    # -- trades --------------------------------------------------------------

    def buy_tokens(self, caller: str, token: str, amount: int, max_cost: int, recipient: str) -> TradeResult:
        """Mint *amount* tokens to *recipient*, paid for by *caller*."""
        caller = canonical_address(caller, name="caller")
        recipient = canonical_address(recipient, name="recipient")
        with self._lock, self._rejections("buy", caller=caller, token=token, amount=amount):
            s = self.settings
            _require_amount(amount)
            uint.require_uint(max_cost, "max_cost")
            quote = self._quote_buy(token, amount)
            tok = canonical_address(token, name="token")

            if quote.total > max_cost:
                raise SlippageExceeded(f"cost {quote.total} exceeds max_cost {max_cost}")
            if s.reserve.allowance(caller, self.address) < quote.total:
                raise InsufficientAllowance(f"allowance below {quote.total}")

            with atomic(self._participants()):
                if not s.reserve.transfer_from(self.address, caller, s.vault.address, quote.raw):
                    raise TransferFailed("principal transfer to vault failed")
                if quote.trading_fee > 0 and not s.reserve.transfer_from(
                    self.address, caller, s.fee_recipient, quote.trading_fee
                ):
                    raise TransferFailed("fee transfer failed")

                s.vault.accrue_interest()
                shares = s.vault.invest(self.address, quote.raw)
                s.tokens.mint(self.address, tok, recipient, amount)

                if s.attribute_trades_to_escrow:
                    pre = self._ledger.get(tok)
                    self._stage(tok, pre, escrow.record_deposit(pre, quote.raw, shares))

            result = TradeResult(
                token=tok,
                amount=amount,
                raw=quote.raw,
                trading_fee=quote.trading_fee,
                total=quote.total,
                recipient=recipient,
            )
            self._events.append(
                ExchangeEvent(
                    event=Event.TOKENS_BOUGHT,
                    token=tok,
                    fields={"buyer": caller, "recipient": recipient, "amount": amount,
                            "raw_cost": quote.raw, "fee": quote.trading_fee, "shares": shares},
                )
            )
            logger.info("tokens_bought", token=tok, buyer=caller, amount=amount,
                        raw_cost=quote.raw, fee=quote.trading_fee)
            return result

    def sell_tokens(self, caller: str, token: str, amount: int, min_price: int, recipient: str) -> TradeResult:
        """Burn *amount* of *caller*'s tokens and pay the proceeds to *recipient*."""
        caller = canonical_address(caller, name="caller")
        recipient = canonical_address(recipient, name="recipient")
        with self._lock, self._rejections("sell", caller=caller, token=token, amount=amount):
            s = self.settings
            _require_amount(amount)
            uint.require_uint(min_price, "min_price")
            quote = self._quote_sell(token, amount)
            tok = canonical_address(token, name="token")

            if quote.total < min_price:
                raise SlippageExceeded(f"price {quote.total} below min_price {min_price}")
            if s.tokens.balance_of(tok, caller) < amount:
                raise InsufficientBalance(f"{caller} holds fewer than {amount} tokens")

            with atomic(self._participants()):
                s.tokens.burn(self.address, tok, caller, amount)

                s.vault.accrue_interest()
                rate = s.vault.exchange_rate()
                # One pull covers both the payout and the fee.
                if not s.vault.redeem(self.address, self.address, quote.raw):
                    raise TransferFailed("vault redemption failed")
                if not s.reserve.transfer(self.address, recipient, quote.total):
                    raise TransferFailed("payout transfer failed")
                if quote.trading_fee > 0 and not s.reserve.transfer(
                    self.address, s.fee_recipient, quote.trading_fee
                ):
                    raise TransferFailed("fee transfer failed")

                if s.attribute_trades_to_escrow:
                    pre = self._ledger.get(tok)
                    self._stage(tok, pre, escrow.record_redemption(pre, quote.raw, rate))

            result = TradeResult(
                token=tok,
                amount=amount,
                raw=quote.raw,
                trading_fee=quote.trading_fee,
                total=quote.total,
                recipient=recipient,
            )
            self._events.append(
                ExchangeEvent(
                    event=Event.TOKENS_SOLD,
                    token=tok,
                    fields={"seller": caller, "recipient": recipient, "amount": amount,
                            "raw_price": quote.raw, "fee": quote.trading_fee},
                )
            )
            logger.info("tokens_sold", token=tok, seller=caller, amount=amount,
                        raw_price=quote.raw, fee=quote.trading_fee)
            return result

    # -- interest ------------------------------------------------------------

    def withdraw_interest(self, caller: str, token: str) -> int:
        """Pay *token*'s claimable interest to its authorized withdrawer.

        A payout never dips into principal: it is capped by the record's share
        value above its own principal and by what the exchange's vault position
        holds beyond every token's principal. Anything held back stays claimable.

        Returns the amount paid; 0 means nothing was payable and nothing changed.
        """
        caller = canonical_address(caller, name="caller")
        tok = canonical_address(token, name="token")
        with self._lock, self._rejections("withdraw_interest", caller=caller, token=tok):
            s = self.settings
            if self._withdrawers.get(tok) != caller:
                raise NotAuthorized(f"{caller} may not withdraw interest of {tok}")

            with atomic(self._participants()):
                s.vault.accrue_interest()
                rate = s.vault.exchange_rate()
                pre = self._ledger.get(tok)
                outcome = escrow.withdraw(pre, rate, self._interest_headroom())
                if outcome.payable == 0:
                    logger.debug("interest_withdraw_noop", token=tok)
                    return 0
                if not s.vault.redeem(self.address, caller, outcome.payable):
                    raise TransferFailed("interest redemption failed")
                self._stage(tok, pre, outcome.info)

            self._events.append(
                ExchangeEvent(
                    event=Event.INTEREST_WITHDRAWN,
                    token=tok,
                    fields={"withdrawer": caller, "amount": outcome.payable,
                            "shares_released": outcome.shares_released},
                )
            )
            logger.info("interest_withdrawn", token=tok, withdrawer=caller, amount=outcome.payable)
            return outcome.payable

    def get_interest_payable(self, token: str) -> int:
        """Interest the withdrawer could claim now. Does not change the ledger."""
        tok = canonical_address(token, name="token")
        with self._lock:
            s = self.settings
            s.vault.accrue_interest()
            return escrow.interest_payable(
                self._ledger.get(tok), s.vault.exchange_rate(), self._interest_headroom()
            )

    def authorize_interest_withdrawer(self, caller: str, token: str, withdrawer: str) -> None:
        """Set the address allowed to claim *token*'s interest.

        Only the owner or the currently authorized withdrawer may do this.
        """
        caller = canonical_address(caller, name="caller")
        tok = canonical_address(token, name="token")
        new = canonical_address(withdrawer, name="withdrawer")
        with self._lock, self._rejections("authorize_withdrawer", caller=caller, token=tok):
            s = self.settings
            current = self._withdrawers.get(tok)
            if caller != s.owner and caller != current:
                raise NotAuthorized(f"{caller} may not set the withdrawer of {tok}")
            self._withdrawers.set(tok, new)
            self._events.append(
                ExchangeEvent(
                    event=Event.NEW_INTEREST_WITHDRAWER,
                    token=tok,
                    fields={"previous": current, "withdrawer": new, "by": caller},
                )
            )
            logger.info("interest_withdrawer_set", token=tok, withdrawer=new, previous=current)

    # -- views ---------------------------------------------------------------

    def get_authorized_withdrawer(self, token: str) -> Optional[str]:
        with self._lock:
            return self._withdrawers.get(canonical_address(token, name="token"))

    def get_token_exchange_info(self, token: str) -> TokenExchangeInfo:
        with self._lock:
            return self._ledger.get(canonical_address(token, name="token"))

    @property
    def events(self) -> Tuple[ExchangeEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def state_root(self) -> str:
        with self._lock:
            return compute_ledger_root(self._ledger, self._withdrawers)

    def ledger_snapshot(self) -> dict[str, dict[str, int]]:
        with self._lock:
            return self._ledger.to_dict()
