"""
Dashboard pages rendered with Jinja templates.
"""

import logging
import math
from flask import Blueprint, request, render_template, current_app

from src.middleware.ip_whitelist import ip_whitelist_required
from src.storage import CallbackFilters, get_storage
from src.utils.network import get_local_ip_address
from src.utils.timezone import get_timezone, parse_day, parse_timestamp

logger = logging.getLogger(__name__)

web_bp = Blueprint('web', __name__)

RECENT_CALLBACKS = 10
CALLBACKS_PER_PAGE = 50


@web_bp.app_context_processor
def inject_server_info():
    return {
        'hostname': get_local_ip_address(),
        'port': current_app.config.get('PORT'),
        'timezone': current_app.config.get('TIMEZONE'),
        'storage_kind': get_storage().kind
    }


@web_bp.app_template_filter('localtime')
def localtime_filter(value, fmt='%Y-%m-%d %H:%M:%S'):
    """Format a stored ISO timestamp in the configured timezone."""
    if not value:
        return ''
    tz = get_timezone(current_app.config.get('TIMEZONE'))
    return parse_timestamp(value, tz).astimezone(tz).strftime(fmt)


def render_error(message, status_code):
    return render_template('error.html', message=message), status_code


def is_valid_day(value):
    try:
        parse_day(value, get_timezone(current_app.config.get('TIMEZONE')))
    except ValueError:
        return False
    return True


@web_bp.route('/', methods=['GET'])
@ip_whitelist_required
def dashboard():
    """Routes and the most recent callbacks."""
    try:
        storage = get_storage()
        routes = storage.get_routes()
        recent = storage.get_callbacks(CallbackFilters(limit=RECENT_CALLBACKS))

        return render_template('dashboard.html', routes=routes, recent_callbacks=recent['data'])
    except Exception as e:
        logger.error(f"Error rendering dashboard: {str(e)}")
        return render_error("Error loading dashboard", 500)


@web_bp.route('/callbacks', methods=['GET'])
@ip_whitelist_required
def view_callbacks():
    """Paginated callback list."""
    route = request.args.get('route') or None
    date = request.args.get('date') or None
    page = max(request.args.get('page', default=1, type=int) or 1, 1)

    if date and not is_valid_day(date):
        return render_error(f"Invalid date: {date}", 400)

    try:
        storage = get_storage()
        result = storage.get_callbacks(CallbackFilters(
            route=route,
            date=date,
            limit=CALLBACKS_PER_PAGE,
            offset=(page - 1) * CALLBACKS_PER_PAGE
        ))
        total_pages = math.ceil(result['total'] / CALLBACKS_PER_PAGE)

        return render_template(
            'callbacks.html',
            callbacks=result['data'],
            routes=storage.get_routes(),
            available_dates=storage.get_callback_dates(),
            filters={'route': route, 'date': date, 'page': page},
            pagination={
                'current_page': page,
                'total_pages': total_pages,
                'total': result['total'],
                'has_next': page < total_pages,
                'has_prev': page > 1
            }
        )
    except Exception as e:
        logger.error(f"Error viewing callbacks: {str(e)}")
        return render_error("Error loading callbacks", 500)


@web_bp.route('/callbacks/<callback_id>', methods=['GET'])
@ip_whitelist_required
def view_callback_detail(callback_id):
    """Full headers, query and body of one callback."""
    date = request.args.get('date') or None
    if date and not is_valid_day(date):
        return render_error(f"Invalid date: {date}", 400)

    try:
        callback = get_storage().get_callback_by_id(callback_id, date)
        if not callback:
            return render_error("Callback not found", 404)

        return render_template('callback_detail.html', callback=callback, date=date)
    except Exception as e:
        logger.error(f"Error viewing callback detail: {str(e)}")
        return render_error("Error loading callback detail", 500)


@web_bp.route('/routes', methods=['GET'])
@ip_whitelist_required
def manage_routes():
    """Route management page; changes go through the JSON API."""
    try:
        return render_template('routes.html', routes=get_storage().get_routes())
    except Exception as e:
        logger.error(f"Error managing routes: {str(e)}")
        return render_error("Error loading routes", 500)
