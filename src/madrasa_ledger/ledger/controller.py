from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_user, json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import LedgerKind, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..users.access import AccessScope
from .model import Settlement
from .service import make_window

_KINDS = {"fees": LedgerKind.FEE, "salaries": LedgerKind.SALARY}


def _kind(segment: str) -> LedgerKind:
    kind = _KINDS.get(segment)
    if kind is None:
        raise NotFoundError(f"Unknown ledger {segment!r}")
    return kind


def window_from_args(args):
    return make_window(
        period_month=args.get("month") or None,
        start=args.get("start") or None,
        end=args.get("end") or None,
    )


def settlement_json(s: Settlement) -> dict:
    out = to_json(s)
    out["balance_label"] = s.balance_label
    return out


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger_service

    def _require_visible(kind: LedgerKind, subject_id: str) -> None:
        scope = AccessScope.for_user(current_user(), container.store.snapshot)
        visible = scope.can_see_fees() if kind == LedgerKind.FEE else scope.can_see_salary(subject_id)
        if not visible:
            raise AuthorizationError("You do not have access to these records")

    @app.route("/api/ledger/<ledger_name>", methods=["POST"], endpoint="ledger_post")
    @roles_required(Role.ADMIN)
    def ledger_post(ledger_name: str):
        kind = _kind(ledger_name)
        data = json_body()
        txn = ledger.post_transaction(
            kind,
            data.get("subject_id"),
            data.get("period_month"),
            data.get("amount"),
            data.get("payment_mode"),
            transaction_date=data.get("transaction_date"),
            reference=data.get("reference"),
        )
        return jsonify({"ok": True, "transaction": to_json(txn)})

    @app.route("/api/ledger/<ledger_name>/settlements", methods=["GET"], endpoint="ledger_settle_all")
    @login_required
    def ledger_settle_all(ledger_name: str):
        kind = _kind(ledger_name)
        user = current_user()
        rows = ledger.settle_all(kind, window_from_args(request.args))
        if user.role != Role.ADMIN:
            _require_visible(kind, user.teacher_id)
            rows = [s for s in rows if s.subject_id == user.teacher_id]
        return jsonify({"ok": True, "settlements": [settlement_json(s) for s in rows]})

    @app.route("/api/ledger/<ledger_name>/settlements/<subject_id>", methods=["GET"], endpoint="ledger_settle")
    @login_required
    def ledger_settle(ledger_name: str, subject_id: str):
        kind = _kind(ledger_name)
        _require_visible(kind, subject_id)
        settlement = ledger.settle(kind, subject_id, window_from_args(request.args))
        return jsonify({"ok": True, "settlement": settlement_json(settlement)})

    @app.route("/api/ledger/<ledger_name>/suggested/<subject_id>", methods=["GET"], endpoint="ledger_suggested")
    @roles_required(Role.ADMIN)
    def ledger_suggested(ledger_name: str, subject_id: str):
        kind = _kind(ledger_name)
        amount = ledger.suggested_payment(kind, subject_id, request.args.get("month", ""))
        return jsonify({"ok": True, "amount": to_json(amount)})

    @app.route("/api/ledger/<ledger_name>/transactions", methods=["GET"], endpoint="ledger_transactions")
    @login_required
    def ledger_transactions(ledger_name: str):
        kind = _kind(ledger_name)
        user = current_user()
        subject_id = request.args.get("subject_id") or None
        if user.role != Role.ADMIN:
            subject_id = user.teacher_id
            _require_visible(kind, subject_id)
        rows = ledger.transactions_for(kind, subject_id=subject_id)
        return jsonify({"ok": True, "transactions": to_json(rows)})

    @app.route("/api/receipts/<receipt_no>", methods=["GET"], endpoint="receipt_get")
    @login_required
    def receipt_get(receipt_no: str):
        txn = ledger.find_receipt(receipt_no)
        _require_visible(txn.kind, txn.subject_id)
        return jsonify({"ok": True, "transaction": to_json(txn)})
