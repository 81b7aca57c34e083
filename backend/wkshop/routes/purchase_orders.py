from __future__ import annotations
import re
from flask import Blueprint, request
from sqlalchemy import select, func
from wkshop import get_db
from wkshop.config.cost_input import COST_FIELDS, touches_cost_fields
from wkshop.config.pagination import normalize_pagination
from wkshop.constants.permissions import RESOURCE_PURCHASE_ORDERS, ACTION_READ, ACTION_WRITE, ACTION_DELETE
from wkshop.decorators.auth import require_access, access_gate, current_principal
from wkshop.decorators.audit import audit_log
from wkshop.errors import NotFoundError, ValidationError
from wkshop.models.purchase_order import PurchaseOrder
from wkshop.utils.validation import validate_choice, coerce_number

po_bp = Blueprint('purchase_orders', __name__)

_PO_NUMBER = re.compile(r'PO-(\d+)')

# Editable fields beyond the cost fields
PLAIN_FIELDS = ('product_name', 'order_status')


@po_bp.get('')
@require_access(RESOURCE_PURCHASE_ORDERS, ACTION_READ)
def list_purchase_orders():
    session = get_db()
    limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    q = select(PurchaseOrder)
    status = request.args.get('order_status')
    if status:
        q = q.where(PurchaseOrder.order_status==validate_choice(status, PurchaseOrder.ALL_STATUSES, 'order_status'))
    total = session.execute(select(func.count()).select_from(q.subquery())).scalar_one()
    rows = session.execute(q.order_by(PurchaseOrder.id.desc()).offset(offset).limit(limit)).scalars().all()
    return {
        'success': True,
        'data': [_po_json(r) for r in rows],
        'pagination': {'total': total, 'limit': limit, 'offset': offset, 'returned': len(rows)},
    }


@po_bp.post('')
@require_access(RESOURCE_PURCHASE_ORDERS, ACTION_WRITE)
@audit_log('PO.CREATE', entity='PurchaseOrder', entity_id_key='id', meta_keys=['po_number'])
def create_purchase_order():
    session = get_db()
    data = _json_body()
    product_name = data.get('product_name')
    if not isinstance(product_name, str) or not product_name.strip() or data.get('unit_price') is None or data.get('quantity') is None:
        raise ValidationError('product_name, unit_price and quantity required')
    quantity = coerce_number(data['quantity'], 'quantity', minimum=1)
    if int(quantity) != quantity:
        raise ValidationError('quantity must be an integer')
    principal = current_principal()
    po = PurchaseOrder(
        po_number=_next_po_number(),
        product_name=product_name,
        unit_price=coerce_number(data['unit_price'], 'unit_price'),
        quantity=int(quantity),
        created_by=principal.id,
        updated_by=principal.id,
    )
    session.add(po)
    session.commit()
    return _po_json(po), 201


@po_bp.get('/<int:po_id>')
@require_access(RESOURCE_PURCHASE_ORDERS, ACTION_READ)
def get_purchase_order(po_id: int):
    return _po_json(_load(po_id))


@po_bp.put('/<int:po_id>')
@require_access(RESOURCE_PURCHASE_ORDERS, ACTION_WRITE)
@audit_log(
    'PO.UPDATE',
    entity='PurchaseOrder',
    entity_id_key='id',
    diff_keys=list(COST_FIELDS) + list(PLAIN_FIELDS),
    pre_fetch=lambda a, kw: _prefetch_po(kw.get('po_id')),
)
def update_purchase_order(po_id: int):
    data = _json_body()
    # Cost fields need the allow-list on top of write access
    if touches_cost_fields(data):
        access_gate().require_cost_input(current_principal())
    session = get_db()
    po = _load(po_id)
    for field in COST_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == 'commission_type':
            if value is not None and not isinstance(value, str):
                raise ValidationError('commission_type must be a string')
            po.commission_type = value
        elif field == 'quantity':
            qty = coerce_number(value, 'quantity', minimum=1)
            if qty is None or int(qty) != qty:
                raise ValidationError('quantity must be an integer')
            po.quantity = int(qty)
        elif field == 'back_margin':
            po.back_margin = coerce_number(value, field)
        else:
            number = coerce_number(value, field)
            if number is None:
                raise ValidationError(f'{field} cannot be null')
            setattr(po, field, number)
    if 'product_name' in data:
        if not isinstance(data['product_name'], str) or not data['product_name'].strip():
            raise ValidationError('product_name cannot be empty')
        po.product_name = data['product_name']
    if 'order_status' in data:
        po.order_status = validate_choice(data['order_status'], PurchaseOrder.ALL_STATUSES, 'order_status')
    po.updated_by = current_principal().id
    session.commit()
    return _po_json(po)


@po_bp.delete('/<int:po_id>')
@require_access(RESOURCE_PURCHASE_ORDERS, ACTION_DELETE)
@audit_log('PO.DELETE', entity='PurchaseOrder', entity_id_arg='po_id')
def delete_purchase_order(po_id: int):
    session = get_db()
    po = _load(po_id)
    session.delete(po)
    session.commit()
    return {'success': True, 'id': po_id}


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('JSON object body required')
    return data


def _load(po_id: int) -> PurchaseOrder:
    session = get_db()
    po = session.execute(select(PurchaseOrder).where(PurchaseOrder.id==po_id)).scalar_one_or_none()
    if not po:
        raise NotFoundError(f'Purchase order {po_id} not found')
    return po


def _next_po_number() -> str:
    """PO-001, PO-002, ... following the most recently created number."""
    session = get_db()
    last = session.execute(
        select(PurchaseOrder.po_number).where(PurchaseOrder.po_number.like('PO-%')).order_by(PurchaseOrder.id.desc()).limit(1)
    ).scalar_one_or_none()
    match = _PO_NUMBER.match(last) if last else None
    if not match:
        return 'PO-001'
    return f"PO-{int(match.group(1)) + 1:03d}"


def _num(value):
    return float(value) if value is not None else None


def _po_json(po: PurchaseOrder):
    return {
        'id': po.id,
        'po_number': po.po_number,
        'product_name': po.product_name,
        'unit_price': _num(po.unit_price),
        'back_margin': _num(po.back_margin),
        'quantity': po.quantity,
        'commission_type': po.commission_type,
        'commission_rate': _num(po.commission_rate),
        'shipping_cost': _num(po.shipping_cost),
        'warehouse_shipping_cost': _num(po.warehouse_shipping_cost),
        'advance_payment_rate': _num(po.advance_payment_rate),
        'order_status': po.order_status,
        'created_by': po.created_by,
        'updated_by': po.updated_by,
    }


def _prefetch_po(po_id: int):
    session = get_db()
    po = session.execute(select(PurchaseOrder).where(PurchaseOrder.id==po_id)).scalar_one_or_none()
    if not po:
        return {}
    return _po_json(po)
