# ==============================================================================
# API DEL PUNTO DE VENTA (Flask)
# ==============================================================================
# Rutas JSON para la interfaz de caja. Las rutas solo traducen HTTP ↔
# servicios: toda la lógica de negocio vive en services/.
#
# Los errores del dominio (PDVError) se convierten en respuestas JSON
# {"success": false, "error": ...} en un único manejador.
# ==============================================================================

import os
from typing import Any, Dict

from flask import Flask, request

from app_pdv import config
from app_pdv.app_container import AppContainer, get_container
from app_pdv.errors import (
    EmptyCart,
    InvalidDiscount,
    InvalidPayment,
    InvalidProduct,
    InvalidQuantity,
    OutOfStock,
    PaymentMismatch,
    PDVError,
    PersistenceFailure,
    ProductNotFound,
)
from app_pdv.performance_logger import init_profiling


# Código HTTP por tipo de error (el primero que coincida en el MRO)
ERROR_STATUS = {
    OutOfStock: 409,
    ProductNotFound: 404,
    PaymentMismatch: 422,
    InvalidPayment: 400,
    InvalidDiscount: 400,
    InvalidQuantity: 400,
    InvalidProduct: 400,
    EmptyCart: 400,
    PersistenceFailure: 500,
}


def status_for(error: PDVError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def create_app(container: AppContainer = None) -> Flask:
    """
    Crea la aplicación Flask.

    Args:
        container: Contenedor de dependencias (por defecto el global)

    Returns:
        App lista para servir (diario de caja ya recuperado)
    """
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024  # 1 MB

    container = container or get_container()
    recovered = container.startup()
    if recovered and not config.PRODUCTION_MODE:
        print(f"[DIARIO] Ventas recuperadas al iniciar: {', '.join(recovered)}")

    app.extensions['pdv_container'] = container

    # ═══════════════════════════════════════════════════════════════════════
    # INICIALIZAR SISTEMA DE PROFILING
    # ═══════════════════════════════════════════════════════════════════════
    init_profiling(app)

    inventory = container.inventory_service
    sales = container.sales_service
    cart = container.cart
    audit = container.audit_service

    @app.errorhandler(PDVError)
    def handle_pdv_error(error: PDVError):
        body = {'success': False}
        body.update(error.to_dict())
        return body, status_for(error)

    # ═══════════════════════════════════════════════════════════════════════
    # CATÁLOGO
    # ═══════════════════════════════════════════════════════════════════════

    @app.route('/api/productos', methods=['GET'])
    def api_list_products():
        products = inventory.list_products(
            category=request.args.get('categoria') or None,
            query=request.args.get('q') or None
        )
        return {
            'success': True,
            'products': [p.to_dict() for p in products],
            'count': len(products)
        }

    @app.route('/api/productos/bajo-stock', methods=['GET'])
    def api_low_stock():
        threshold = request.args.get('umbral', config.LOW_STOCK_THRESHOLD, type=int)
        products = inventory.low_stock(threshold)
        return {
            'success': True,
            'products': [p.to_dict() for p in products],
            'count': len(products)
        }

    @app.route('/api/productos/categorias', methods=['GET'])
    def api_categories():
        return {'success': True, 'categories': inventory.categories()}

    @app.route('/api/productos/<product_id>/historial', methods=['GET'])
    def api_product_history(product_id):
        inventory.get_product(product_id)
        return {'success': True, 'logs': audit.get_product_history(product_id)}

    @app.route('/api/productos', methods=['POST'])
    def api_create_product():
        data = _json_body()
        if not data:
            return {'success': False, 'error': 'Datos no recibidos'}, 400
        product = inventory.add_product(data, user=request.args.get('user'))
        return {'success': True, 'product': product.to_dict()}, 201

    @app.route('/api/productos/<product_id>', methods=['PUT'])
    def api_update_product(product_id):
        data = _json_body()
        if not data:
            return {'success': False, 'error': 'Datos no recibidos'}, 400
        product = inventory.update_product(product_id, data, user=request.args.get('user'))
        return {'success': True, 'product': product.to_dict()}

    @app.route('/api/productos/<product_id>', methods=['DELETE'])
    def api_delete_product(product_id):
        removed = inventory.delete_product(product_id, user=request.args.get('user'))
        return {'success': True, 'message': f"Producto {removed.name} eliminado"}

    # ═══════════════════════════════════════════════════════════════════════
    # CARRITO
    # ═══════════════════════════════════════════════════════════════════════

    @app.route('/api/carrito', methods=['GET'])
    def api_get_cart():
        return {'success': True, 'cart': cart.to_dict()}

    @app.route('/api/carrito/agregar', methods=['POST'])
    def api_cart_add():
        data = _json_body()
        product = inventory.get_product(str(data.get('product_id', '')))
        cart.add_item(product, data.get('quantity', 1))
        return {'success': True, 'cart': cart.to_dict()}

    @app.route('/api/carrito/actualizar', methods=['POST'])
    def api_cart_update():
        data = _json_body()
        cart.update_quantity(str(data.get('product_id', '')), data.get('quantity'))
        return {'success': True, 'cart': cart.to_dict()}

    @app.route('/api/carrito/eliminar', methods=['POST'])
    def api_cart_remove():
        data = _json_body()
        cart.remove_item(str(data.get('product_id', '')))
        return {'success': True, 'cart': cart.to_dict()}

    @app.route('/api/carrito/limpiar', methods=['POST'])
    def api_cart_clear():
        cart.clear()
        return {'success': True, 'cart': cart.to_dict()}

    @app.route('/api/carrito/pagos/validar', methods=['POST'])
    def api_preview_payments():
        """Cuánto falta o sobra con los pagos ingresados (no cierra la venta)."""
        data = _json_body()
        summary = sales.preview_payments(
            cart,
            data.get('discount', 0.0),
            data.get('payments') or []
        )
        return {'success': True, 'summary': summary}

    @app.route('/api/carrito/confirmar', methods=['POST'])
    def api_confirm_sale():
        """
        Cierra la venta del carrito.

        Body: {"discount": 0, "payments": [{"method": "cash", "amount": 10.0}], "user": "..."}
        """
        data = _json_body()
        sale = sales.complete_sale(
            cart,
            discount=data.get('discount', 0.0),
            payments=data.get('payments') or [],
            user=data.get('user')
        )
        return {
            'success': True,
            'message': 'Venta registrada',
            'sale': sale.to_dict(),
            'cart': cart.to_dict()
        }, 201

    # ═══════════════════════════════════════════════════════════════════════
    # VENTAS
    # ═══════════════════════════════════════════════════════════════════════

    @app.route('/api/ventas', methods=['GET'])
    def api_list_sales():
        from_date = request.args.get('desde')
        to_date = request.args.get('hasta')
        if from_date or to_date:
            result = sales.search_sales(from_date, to_date)
        else:
            result = sales.list_sales(request.args.get('limit', type=int))
        return {
            'success': True,
            'sales': [s.to_dict() for s in result],
            'count': len(result)
        }

    @app.route('/api/ventas/totales', methods=['GET'])
    def api_sales_totals():
        return {'success': True, 'totals': sales.calculate_totals()}

    @app.route('/api/ventas/<sale_id>', methods=['GET'])
    def api_get_sale(sale_id):
        sale = sales.get_sale(sale_id)
        if sale is None:
            return {'success': False, 'error': 'Venta no encontrada'}, 404
        return {'success': True, 'sale': sale.to_dict()}

    @app.route('/api/ventas/<sale_id>/auditoria', methods=['GET'])
    def api_sale_trail(sale_id):
        if sales.get_sale(sale_id) is None:
            return {'success': False, 'error': 'Venta no encontrada'}, 404
        return {'success': True, 'logs': audit.get_sale_trail(sale_id)}

    @app.route('/api/ventas/checkpoint', methods=['POST'])
    def api_checkpoint():
        """Reintenta el guardado tras una PersistenceFailure con committed=True."""
        sales.checkpoint()
        return {'success': True, 'pending': sales.has_pending_checkpoint()}

    # ═══════════════════════════════════════════════════════════════════════
    # AUDITORÍA
    # ═══════════════════════════════════════════════════════════════════════

    @app.route('/api/auditoria', methods=['GET'])
    def api_audit_logs():
        logs = audit.get_logs(
            log_type=request.args.get('tipo') or None,
            limit=request.args.get('limit', type=int)
        )
        return {'success': True, 'logs': logs, 'count': len(logs)}

    return app


if __name__ == "__main__":
    # Configuración para desarrollo local
    # En producción usar WSGI (gunicorn wsgi:app)
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))

    if not DEBUG:
        print(f"\n{'='*50}")
        print(f"  Punto de venta en http://{HOST}:{PORT}")
        print(f"  Datos en: {config.DATA_DIR}")
        print(f"{'='*50}\n")

    create_app().run(debug=DEBUG, host=HOST, port=PORT)
