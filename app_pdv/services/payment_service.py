# ==============================================================================
# SERVICIO DE PAGOS (CONCILIACIÓN)
# ==============================================================================
# Valida que los pagos entregados cuadren con el total antes de cerrar una
# venta. Validación pura: no guarda nada ni modifica estado.
# ==============================================================================

import math
from typing import Any, Dict, Mapping, Sequence, Tuple, Union

from app_pdv import config
from app_pdv.errors import InvalidPayment, PaymentMismatch
from app_pdv.models import Payment, PaymentMethod


PaymentInput = Union[Payment, Mapping[str, Any]]


class PaymentService:
    """
    Conciliador de pagos.

    Responsabilidades:
    - Normalizar cada pago (método conocido, monto > 0)
    - Verificar que la suma cuadre con el total
    - Dar una vista previa (pagado / falta) sin lanzar errores
    """

    VALID_METHODS = frozenset(m.value for m in PaymentMethod)

    def __init__(self, epsilon: float = config.PAYMENT_EPSILON):
        """
        Args:
            epsilon: Tolerancia de redondeo (no es margen de negociación)
        """
        self.epsilon = epsilon

    def normalize_payment(self, raw: PaymentInput, index: int = 0) -> Payment:
        """
        Convierte un pago de entrada en Payment.

        Args:
            raw: Payment o dict {'method': 'cash', 'amount': 10.0}
            index: Posición del pago (para el mensaje de error)

        Raises:
            InvalidPayment: Método desconocido o monto no positivo
        """
        if isinstance(raw, Payment):
            method, amount = raw.method, raw.amount
        elif isinstance(raw, Mapping):
            method, amount = raw.get('method'), raw.get('amount')
        else:
            raise InvalidPayment(index, f"formato no reconocido ({type(raw).__name__})")

        if isinstance(method, PaymentMethod):
            method = method.value
        if not isinstance(method, str) or method.strip().lower() not in self.VALID_METHODS:
            raise InvalidPayment(index, f"método desconocido {method!r}")

        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise InvalidPayment(index, f"monto no numérico {amount!r}")
        if not math.isfinite(amount) or amount <= 0:
            raise InvalidPayment(index, "el monto debe ser mayor a 0")

        return Payment(method=PaymentMethod(method.strip().lower()), amount=float(amount))

    def validate_payments(self, payments: Sequence[PaymentInput]) -> Tuple[Payment, ...]:
        """
        Normaliza todos los pagos, conservando el orden de ingreso.

        Raises:
            InvalidPayment: payments no es una lista o algún pago es inválido
        """
        if not isinstance(payments, (list, tuple)):
            raise InvalidPayment(0, f"formato no reconocido ({type(payments).__name__})")
        return tuple(self.normalize_payment(p, i) for i, p in enumerate(payments))

    def reconcile(self, total: float, payments: Sequence[PaymentInput]) -> Tuple[Payment, ...]:
        """
        Verifica que los pagos cubran exactamente el total.

        Args:
            total: subtotal - descuento
            payments: Pagos en orden de ingreso

        Returns:
            Tupla de Payment normalizados

        Raises:
            InvalidPayment: Algún pago es inválido
            PaymentMismatch: La suma no cuadra (delta = pagado - total)
        """
        if isinstance(total, bool) or not isinstance(total, (int, float)) \
                or not math.isfinite(total) or total < 0:
            raise ValueError(f"Total inválido: {total!r}")

        normalized = self.validate_payments(payments)
        paid = sum(p.amount for p in normalized)

        if abs(paid - total) > self.epsilon:
            raise PaymentMismatch(
                delta=round(paid - total, 2),
                total=round(total, 2),
                paid=round(paid, 2)
            )
        return normalized

    def summarize(self, total: float, payments: Sequence[PaymentInput]) -> Dict[str, Any]:
        """
        Vista previa para la pantalla de cobro. Nunca lanza.

        Returns:
            Dict con ok, paid, remaining, delta y error si corresponde
        """
        try:
            normalized = self.validate_payments(payments)
        except InvalidPayment as e:
            return {'ok': False, 'error': str(e), 'index': e.index}

        paid = round(sum(p.amount for p in normalized), 2)
        delta = round(paid - total, 2)
        return {
            'ok': abs(paid - total) <= self.epsilon,
            'total': round(total, 2),
            'paid': paid,
            'remaining': round(max(0.0, total - paid), 2),
            'delta': delta,
            'payments': [p.to_dict() for p in normalized],
        }
