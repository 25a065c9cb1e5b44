"""Flask web application for vehicle registrations."""

import logging
from datetime import date
from functools import wraps
from typing import Optional, Tuple

from flask import (
    Flask,
    Response,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from registry import (
    CustomFilter,
    ExportError,
    FilterState,
    PermissionDenied,
    RegistrationStore,
    RegistrationView,
    Urgency,
    VEHICLE_TYPES,
    WriteError,
    YamlStore,
    apply_filters,
    export_csv,
    export_filename,
    parse_date,
)
from registry.auth import authenticate, validate_login
from registry.config import Settings, configure_logging, load_settings
from registry.dashboard import summarize
from registry.export import CSV_MIMETYPE
from registry.validation import build_registration, validate_registration
from registry.view import AutoRefresher

logger = logging.getLogger(__name__)

app = Flask(__name__)

STATUS_OPTIONS = ["pending", "approved", "rejected"]


def init_registry(flask_app: Flask, store: RegistrationStore, settings: Settings) -> RegistrationView:
    """Attach a store and registration view to the app."""
    flask_app.secret_key = settings.secret_key
    view = RegistrationView(store, settings.collection)
    flask_app.extensions["registry_store"] = store
    flask_app.extensions["registry_view"] = view
    flask_app.extensions["registry_settings"] = settings
    return view


def get_view() -> RegistrationView:
    return app.extensions["registry_view"]


def get_store() -> RegistrationStore:
    return app.extensions["registry_store"]


def ensure_loaded(view: RegistrationView) -> None:
    """Load on first use; report a failure without discarding old data."""
    if view.loaded:
        return
    if not view.refresh():
        flash(fetch_error_message(view.last_error), "error")


def fetch_error_message(error) -> str:
    if isinstance(error, PermissionDenied):
        return f"Permission denied. Check the store's access rules. ({error})"
    return f"Database error: {error}"


def login_required(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not session.get("auth_token"):
            return redirect(url_for("login", next=request.path))
        return func(*args, **kwargs)

    return wrapper


def format_date(value):
    """Format date for display (DD/MM/YYYY)."""
    if not value:
        return "N/A"
    parsed = parse_date(value)
    if parsed is None:
        return value
    return parsed.strftime("%d/%m/%Y")


def format_datetime(value):
    """Format timestamp for display, e.g. '20 Sep 2025, 09:39'."""
    if not value:
        return "N/A"
    parsed = parse_date(value)
    if parsed is None:
        return value
    return parsed.strftime("%d %b %Y, %H:%M")


def urgency_color(urgency: Urgency) -> str:
    """Get Tailwind color classes for an urgency level."""
    colors = {
        Urgency.EXPIRED: "bg-red-100 text-red-800 border-red-200",
        Urgency.CRITICAL: "bg-orange-100 text-orange-800 border-orange-200",
        Urgency.WARNING: "bg-yellow-100 text-yellow-800 border-yellow-200",
        Urgency.NORMAL: "bg-green-100 text-green-800 border-green-200",
        Urgency.UNKNOWN: "bg-gray-100 text-gray-500 border-gray-200",
    }
    return colors.get(urgency, "bg-gray-100 text-gray-800")


def status_badge_color(status: str) -> str:
    """Get Tailwind color classes for a registration status badge."""
    colors = {
        "pending": "bg-yellow-500 text-white",
        "approved": "bg-green-500 text-white",
        "rejected": "bg-red-500 text-white",
    }
    return colors.get(status, "bg-gray-500 text-white")


# Register template filters
app.jinja_env.filters["format_date"] = format_date
app.jinja_env.filters["format_datetime"] = format_datetime
app.jinja_env.filters["urgency_color"] = urgency_color
app.jinja_env.filters["status_badge_color"] = status_badge_color


def parse_custom_filter(value):
    try:
        return CustomFilter(value) if value else None
    except ValueError:
        return None


@app.route("/login", methods=["GET", "POST"])
def login():
    """Login page (demo credentials)."""
    if request.method == "GET":
        return render_template("login.html", errors={}, email="")

    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    errors = validate_login(email, password)
    if errors:
        return render_template("login.html", errors=errors, email=email), 400

    result = authenticate(email, password)
    if not result.success:
        flash(result.message, "error")
        return render_template("login.html", errors={}, email=email), 401

    session["auth_token"] = result.token
    session["user_email"] = result.email
    flash("Login successful", "success")
    return redirect(request.args.get("next") or url_for("index"))


@app.route("/logout")
def logout():
    session.clear()
    flash("Logged out", "info")
    return redirect(url_for("login"))


@app.route("/")
@login_required
def index():
    """Dashboard with totals, urgency counts and recent activity."""
    view = get_view()
    ensure_loaded(view)
    stats = summarize(view.rows, view.clock())
    return render_template("index.html", stats=stats, Urgency=Urgency)


@app.route("/register", methods=["GET", "POST"])
@login_required
def register():
    """Registration form."""
    today = get_view().clock()
    if request.method == "GET":
        return render_template(
            "register.html", form={}, errors={}, vehicle_types=VEHICLE_TYPES, today=today.isoformat()
        )

    form = {key: request.form.get(key) for key in request.form}
    errors = validate_registration(form, today)
    if errors:
        return (
            render_template(
                "register.html",
                form=form,
                errors=errors,
                vehicle_types=VEHICLE_TYPES,
                today=today.isoformat(),
            ),
            400,
        )

    record = build_registration(form, submitted_by=session.get("user_email"))
    try:
        record_id = get_store().insert(get_view().collection, record)
    except WriteError as e:
        logger.error("Registration insert failed: %s", e)
        flash(f"Could not save registration: {e}", "error")
        return redirect(url_for("register"))

    flash(f"Registration saved (ID {record_id[-8:]})", "success")
    get_view().refresh()
    return redirect(url_for("registrations"))


def filtered_rows(view: RegistrationView, args) -> Tuple[FilterState, Optional[CustomFilter], list]:
    """Filter a snapshot of the working set by this request's query args only."""
    filters = FilterState.from_mapping(args)
    custom = parse_custom_filter(args.get("custom"))
    return filters, custom, apply_filters(view.rows, filters, custom, view.clock())


@app.route("/registrations")
@login_required
def registrations():
    """Registrations list, soonest expiry first, with filters."""
    view = get_view()
    ensure_loaded(view)
    filters, custom, rows = filtered_rows(view, request.args)

    return render_template(
        "registrations.html",
        rows=rows,
        total=len(view.rows),
        filters=filters,
        custom=custom,
        vehicle_types=VEHICLE_TYPES,
        status_options=STATUS_OPTIONS,
        sort_method=view.sort_method,
    )


@app.route("/registrations/clear")
@login_required
def clear_filters():
    flash("Filters cleared", "info")
    return redirect(url_for("registrations"))


@app.route("/registrations/refresh", methods=["POST"])
@login_required
def refresh_registrations():
    view = get_view()
    if view.refresh():
        flash("Data refreshed!", "success")
    else:
        flash(f"Refresh failed. {fetch_error_message(view.last_error)}", "error")
    return redirect(url_for("registrations", **request.args))


@app.route("/registrations/export")
@login_required
def export_registrations():
    """Download the filtered view as CSV."""
    view = get_view()
    ensure_loaded(view)
    _, _, rows = filtered_rows(view, request.args)
    try:
        csv_text = export_csv(rows)
    except ExportError as e:
        flash(str(e), "warning")
        return redirect(url_for("registrations", **request.args))

    filename = export_filename(date.today())
    return Response(
        csv_text,
        mimetype=CSV_MIMETYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


_settings = load_settings()
init_registry(app, YamlStore(_settings.data_dir), _settings)


if __name__ == "__main__":
    configure_logging(_settings.log_level)
    AutoRefresher(get_view(), _settings.refresh_seconds).start()
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
