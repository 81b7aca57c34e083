import logging
from datetime import datetime, timezone
from flask import Blueprint, request, abort
from flask_jwt_extended import create_access_token, jwt_required
from sqlalchemy import select
from wkshop import get_db
from wkshop.models.account import AdminAccount
from wkshop.decorators.auth import current_principal, access_gate

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.post('/login')
def login():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        abort(400, description='JSON object body required')
    account_id = data.get('id'); password = data.get('password')
    if not account_id or not password:
        abort(400, description='id & password required')
    session = get_db()
    account = session.execute(select(AdminAccount).where(AdminAccount.id==account_id)).scalar_one_or_none()
    if not account or not account.verify_password(password):
        logger.warning('login failed for %s', account_id)
        abort(401, description='invalid credentials')
    if not account.is_active:
        logger.warning('login refused for inactive account %s', account_id)
        abort(401, description='account inactive')
    account.last_login_at = datetime.now(timezone.utc)
    session.commit()
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=account.id, additional_claims={'level': account.level})
    logger.info('login ok for %s', account.id)
    return {'access_token': token, 'account': account.to_public()}


@auth_bp.get('/me')
@jwt_required()
def me():
    principal = current_principal()
    session = get_db()
    account = session.execute(select(AdminAccount).where(AdminAccount.id==principal.id)).scalar_one_or_none()
    if not account:
        abort(404)
    return {
        'id': principal.id,
        'level': principal.level,
        'account': account.to_public(),
        'can_edit_cost': access_gate().is_cost_input_allowed(principal.id),
    }
