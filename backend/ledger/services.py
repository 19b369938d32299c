"""
Cash ledger workflows.

``record_transaction`` only ever writes the transaction row. Reducing a
customer's debt is the separate ``post_debt_payment`` operation, and
``create_transaction`` is the single place that decides which of the two a
submitted transaction is.
"""
import logging
from django.db import transaction
from django.utils import timezone
from backend.core.utils import create_audit_log
from backend.parties.services import adjust_customer_debt
from .models import Transaction

logger = logging.getLogger(__name__)


def _actor(user):
    return user if user is not None and user.is_authenticated else None


def record_transaction(data, user=None):
    """Persist a transaction as-is; never touches other balances"""
    with transaction.atomic():
        txn = Transaction.objects.create(
            type=data['type'],
            category=data['category'],
            amount=data['amount'],
            date=data.get('date') or timezone.now(),
            description=data.get('description', ''),
            customer=data.get('customer'),
            supplier=data.get('supplier'),
            created_by=_actor(user),
        )
        create_audit_log(
            user=user,
            action='transaction_create',
            model_name='Transaction',
            object_id=txn.id,
            object_name=f"{txn.type}/{txn.category}",
            changes={'amount': str(txn.amount), 'subject': txn.subject_type, 'related_id': txn.related_id},
        )
    logger.info(f"Recorded transaction {txn.id} ({txn.type}/{txn.category}) amount={txn.amount}")
    return txn


def post_debt_payment(customer, amount, description='', date=None, user=None):
    """
    Record money received against a customer's outstanding debt.

    In one unit of work: writes a ``payment_in``/``debt_payment`` transaction,
    reduces ``total_debt`` by ``amount`` and stamps ``last_payment_date``.
    Overpayment leaves a negative (credit) balance.
    """
    with transaction.atomic():
        txn = Transaction.objects.create(
            type=Transaction.TYPE_PAYMENT_IN,
            category=Transaction.CATEGORY_DEBT_PAYMENT,
            amount=amount,
            date=date or timezone.now(),
            description=description or '',
            customer=customer,
            created_by=_actor(user),
        )
        adjust_customer_debt(customer.pk, -amount, record_payment=True)
        create_audit_log(
            user=user,
            action='debt_payment',
            model_name='Customer',
            object_id=customer.pk,
            object_name=customer.name,
            changes={'amount': str(amount), 'transaction_id': txn.id},
        )
    logger.info(f"Posted debt payment {txn.id} of {amount} for customer {customer.pk}")
    return txn


def create_transaction(data, user=None):
    """
    Route a submitted transaction to the right workflow.

    Only a ``payment_in`` in category ``debt_payment`` whose subject is a
    customer settles debt; every other shape is recorded without side effects.
    """
    candidate = Transaction(type=data['type'], category=data['category'], customer=data.get('customer'))
    if candidate.is_debt_payment:
        return post_debt_payment(
            candidate.customer,
            data['amount'],
            description=data.get('description', ''),
            date=data.get('date'),
            user=user,
        )
    return record_transaction(data, user=user)
