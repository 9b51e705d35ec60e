import math

import pytest

from app_pdv.errors import InvalidPayment, PaymentMismatch
from app_pdv.models import Payment, PaymentMethod
from app_pdv.services import PaymentService


@pytest.fixture
def payments():
    return PaymentService()


def test_reconcile_split_payment_keeps_order(payments):
    result = payments.reconcile(15.00, [
        {'method': 'cash', 'amount': 10.00},
        {'method': 'card', 'amount': 5.00},
    ])
    assert result == (
        Payment(PaymentMethod.CASH, 10.0),
        Payment(PaymentMethod.CARD, 5.0),
    )


def test_reconcile_underpayment_reports_signed_delta(payments):
    with pytest.raises(PaymentMismatch) as exc:
        payments.reconcile(15.00, [{'method': 'cash', 'amount': 10.00}])
    assert exc.value.delta == -5.00
    assert exc.value.total == 15.00
    assert exc.value.paid == 10.00


@pytest.mark.parametrize('amount, delta', [(14.99, -0.01), (15.01, 0.01)])
def test_reconcile_rejects_one_cent_difference(payments, amount, delta):
    with pytest.raises(PaymentMismatch) as exc:
        payments.reconcile(15.00, [{'method': 'pix', 'amount': amount}])
    assert exc.value.delta == delta


def test_reconcile_absorbs_float_representation_error(payments):
    result = payments.reconcile(0.3, [
        {'method': 'cash', 'amount': 0.1},
        {'method': 'card', 'amount': 0.2},
    ])
    assert len(result) == 2


def test_reconcile_zero_total_without_payments(payments):
    assert payments.reconcile(0.0, []) == ()


def test_reconcile_negative_total(payments):
    with pytest.raises(ValueError):
        payments.reconcile(-1.0, [])


@pytest.mark.parametrize('raw', [
    {'method': 'cheque', 'amount': 5.0},
    {'method': None, 'amount': 5.0},
    {'method': 'cash', 'amount': 0},
    {'method': 'cash', 'amount': -5.0},
    {'method': 'cash', 'amount': math.nan},
    {'method': 'cash', 'amount': math.inf},
    {'method': 'cash', 'amount': '5'},
    {'method': 'cash', 'amount': True},
    {'method': 'cash'},
    ('cash', 5.0),
])
def test_invalid_payment_entries(payments, raw):
    with pytest.raises(InvalidPayment) as exc:
        payments.reconcile(10.0, [{'method': 'card', 'amount': 5.0}, raw])
    assert exc.value.index == 1


def test_invalid_entry_reported_before_mismatch(payments):
    # the sum would not match either, but the bad entry wins
    with pytest.raises(InvalidPayment):
        payments.reconcile(100.0, [{'method': 'boleto', 'amount': 1.0}])


def test_normalize_payment_accepts_enum_and_mixed_case(payments):
    assert payments.normalize_payment({'method': ' PIX ', 'amount': 2}) == Payment(PaymentMethod.PIX, 2.0)
    assert payments.normalize_payment({'method': PaymentMethod.CARD, 'amount': 1.5}).method is PaymentMethod.CARD
    assert payments.normalize_payment(Payment(PaymentMethod.CASH, 3.0)).amount == 3.0


def test_summarize_reports_remaining(payments):
    summary = payments.summarize(15.00, [{'method': 'cash', 'amount': 10.00}])
    assert summary['ok'] is False
    assert summary['paid'] == 10.00
    assert summary['remaining'] == 5.00
    assert summary['delta'] == -5.00


def test_summarize_exact_and_change(payments):
    assert payments.summarize(15.00, [{'method': 'card', 'amount': 15.00}])['ok'] is True

    over = payments.summarize(15.00, [{'method': 'cash', 'amount': 20.00}])
    assert over['ok'] is False
    assert over['remaining'] == 0.0
    assert over['delta'] == 5.00


def test_summarize_never_raises_on_bad_entry(payments):
    summary = payments.summarize(15.00, [{'method': 'cash', 'amount': 5}, {'method': 'x', 'amount': 1}])
    assert summary['ok'] is False
    assert summary['index'] == 1
    assert 'error' in summary


@pytest.mark.parametrize('raw', [5, None, 'cash', {'method': 'cash', 'amount': 15.0}])
def test_payments_must_be_a_list(payments, raw):
    with pytest.raises(InvalidPayment) as exc:
        payments.reconcile(15.00, raw)
    assert exc.value.index == 0

    summary = payments.summarize(15.00, raw)
    assert summary['ok'] is False
    assert summary['index'] == 0
