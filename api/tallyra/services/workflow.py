import time
from decimal import Decimal, InvalidOperation
from typing import Callable, Sequence

from tallyra.core.config import settings
from tallyra.core.enums import PaymentMode, WorkflowState
from tallyra.core.exceptions import (
    CommitFailure,
    InvalidAmount,
    InvalidTransition,
    NoMatchingItem,
    PartialCommitFailure,
)
from tallyra.core.logging import get_logger
from tallyra.schemas.catalog import CatalogItem, CustomItem
from tallyra.schemas.sales import CommitOutcome, TransactionDraft
from tallyra.schemas.session import OperatorSession
from tallyra.services.commit import commit
from tallyra.services.discount import assess, requires_override
from tallyra.services.inference import infer, price_selected
from tallyra.services.keypad import Keypad
from tallyra.services.money import parse_amount
from tallyra.services.store import TransactionStore
from tallyra.services.upi import payment_uri, qr_image_url

logger = get_logger(__name__)

INSUFFICIENT_CASH = "cash received is less than the amount due"

PRE_COMMIT_STATES = (
    WorkflowState.ITEM_CONFIRMED,
    WorkflowState.DISCOUNT_REVIEW,
    WorkflowState.PAYMENT_MODE_SELECTION,
    WorkflowState.PAYMENT_DETAIL_CAPTURE,
)


class TransactionWorkflow:
    def __init__(
        self,
        session: OperatorSession,
        store: TransactionStore,
        catalog: Sequence[CatalogItem] | None = None,
        clock: Callable[[], float] = time.monotonic,
        display_delay: float | None = None,
    ) -> None:
        self.session = session
        self.store = store
        self.keypad = Keypad()
        self._catalog = list(catalog) if catalog is not None else None
        self._clock = clock
        self._display_delay = (
            settings.commit_display_delay_seconds if display_delay is None else display_delay
        )
        self._committing = False
        self._reset()

    def _reset(self) -> None:
        self.state = WorkflowState.ENTERING_AMOUNT
        self.draft: TransactionDraft | None = None
        self.outcome: CommitOutcome | None = None
        self.error: str | None = None
        self._selected: CatalogItem | CustomItem | None = None
        self._committed_at: float | None = None
        self.qr_service = 0
        self.keypad.clear()

    @property
    def catalog(self) -> list[CatalogItem]:
        if self._catalog is None:
            self._catalog = self.store.list_active_items(self.session.shop.id)
        return self._catalog

    def refresh_catalog(self, items: Sequence[CatalogItem] | None = None) -> None:
        self._catalog = list(items) if items is not None else None

    def tick(self) -> None:
        """Return to a fresh sale once the post-commit display delay has passed."""
        if (
            self.state == WorkflowState.COMMITTED
            and self._clock() - self._committed_at >= self._display_delay
        ):
            self._reset()

    def _require(self, *states: WorkflowState) -> None:
        self.tick()
        if self.state not in states:
            raise InvalidTransition(
                f"Action not allowed in state {self.state.value}",
                {"state": self.state.value},
            )

    # amount entry

    def press(self, key: str) -> None:
        self._require(WorkflowState.ENTERING_AMOUNT)
        self.error = None
        self.keypad.press(key)

    def backspace(self) -> None:
        self._require(WorkflowState.ENTERING_AMOUNT)
        self.keypad.backspace()

    def select_item(self, item: CatalogItem) -> None:
        self._require(WorkflowState.ENTERING_AMOUNT)
        self._selected = item

    def use_custom_item(self, name: str, price) -> None:
        self._require(WorkflowState.ENTERING_AMOUNT)
        self._selected = CustomItem(name=name, base_price=parse_amount(price))

    def clear_selection(self) -> None:
        self._require(WorkflowState.ENTERING_AMOUNT)
        self._selected = None

    @property
    def selected_item(self) -> CatalogItem | CustomItem | None:
        return self._selected

    def confirm_amount(self, raw: str | None = None) -> bool:
        """Price the entered amount. Returns False with ``error`` set when rejected."""
        self._require(WorkflowState.ENTERING_AMOUNT)
        self.error = None

        try:
            amount = parse_amount(self.keypad.display if raw is None else raw)
            if self._selected is not None:
                result = price_selected(amount, self._selected)
            else:
                result = infer(amount, self.catalog)
            if result.item is None:
                raise NoMatchingItem("no matching item")
        except (InvalidAmount, NoMatchingItem) as exc:
            logger.info("amount_rejected", reason=exc.message, **exc.details)
            self.error = exc.message
            return False

        self.draft = TransactionDraft(
            entered_amount=amount,
            matched_item=result.item,
            discount=assess(result.item, amount),
        )
        self.state = WorkflowState.ITEM_CONFIRMED
        return True

    def proceed(self) -> None:
        self._require(WorkflowState.ITEM_CONFIRMED)
        if requires_override(self.draft.discount, self.session):
            logger.info(
                "discount_review_required",
                item=self.draft.matched_item.name,
                percentage=str(self.draft.discount.percentage),
            )
            self.state = WorkflowState.DISCOUNT_REVIEW
        else:
            self.state = WorkflowState.PAYMENT_MODE_SELECTION

    # discount review

    def approve_override(self) -> None:
        self._require(WorkflowState.DISCOUNT_REVIEW)
        self.draft.override_approved = True
        self.state = WorkflowState.PAYMENT_MODE_SELECTION

    def reject_override(self) -> None:
        self._require(WorkflowState.DISCOUNT_REVIEW)
        self._reset()

    # payment

    def select_payment_mode(self, mode: PaymentMode) -> bool:
        self._require(WorkflowState.PAYMENT_MODE_SELECTION, WorkflowState.PAYMENT_DETAIL_CAPTURE)
        self.error = None
        self.draft.payment_mode = mode
        if mode != PaymentMode.CASH:
            self.draft.cash_received = None
        self.state = WorkflowState.PAYMENT_DETAIL_CAPTURE

        if mode == PaymentMode.CREDIT:
            return self._commit()
        return True

    def set_cash_received(self, raw) -> bool:
        self._require(WorkflowState.PAYMENT_DETAIL_CAPTURE)
        if self.draft.payment_mode != PaymentMode.CASH:
            raise InvalidTransition("Cash received only applies to cash payments")

        self.error = None
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            self.draft.cash_received = None
            return True
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            self.error = "invalid cash amount"
            return False
        if not value.is_finite() or value < 0:
            self.error = "invalid cash amount"
            return False
        self.draft.cash_received = value
        return True

    @property
    def change_due(self) -> Decimal | None:
        return self.draft.change_amount if self.draft else None

    @property
    def payment_reference(self) -> str:
        if self.draft is None or self.draft.payment_mode != PaymentMode.UPI:
            return ""
        return payment_uri(self.session.shop, self.draft.entered_amount)

    @property
    def payment_qr_url(self) -> str | None:
        if self.draft is None or self.draft.payment_mode != PaymentMode.UPI:
            return None
        if self.session.shop.upi_qr_url:
            return self.session.shop.upi_qr_url
        return qr_image_url(self.payment_reference, self.qr_service) or None

    def next_qr_service(self) -> None:
        self.qr_service += 1

    def confirm_payment(self) -> bool:
        self._require(WorkflowState.PAYMENT_DETAIL_CAPTURE)
        self.error = None
        draft = self.draft
        if (
            draft.payment_mode == PaymentMode.CASH
            and draft.cash_received is not None
            and draft.cash_received < draft.entered_amount
        ):
            self.error = INSUFFICIENT_CASH
            return False
        return self._commit()

    def _commit(self) -> bool:
        self._committing = True
        try:
            self.outcome = commit(self.draft, self.session, self.store)
        except CommitFailure as exc:
            self.error = exc.message
            return False
        except PartialCommitFailure as exc:
            self.outcome = CommitOutcome(transaction=exc.transaction)
            self.error = exc.message
        finally:
            self._committing = False

        self.state = WorkflowState.COMMITTED
        self._committed_at = self._clock()
        return True

    # cancellation

    def back(self) -> None:
        """Drop the draft but keep what is on the display."""
        self._require(*PRE_COMMIT_STATES)
        display = self.keypad.display
        selected = self._selected
        self._reset()
        self.keypad.display = display
        self._selected = selected

    def clear(self) -> None:
        if self._committing:
            raise InvalidTransition("Commit in progress")
        self._reset()
