"""
ReplRepo - Web Application

A Flask app for browsing starter templates, saving them into personal
lists, and reviewing them. All data lives in Supabase.

Run with: python -m web.app
Or: python main.py
"""

import sys
from pathlib import Path
from typing import Optional

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from flask import Flask, flash, g, jsonify, redirect, render_template, request, session, url_for
from loguru import logger

from replrepo.auth import AuthProvider, SupabaseAuth
from replrepo.catalog import ALL_TYPES, get_leaderboard, star_breakdown
from replrepo.config import (
    DEBUG,
    FLASK_SECRET_KEY,
    SUPABASE_KEY,
    SUPABASE_URL,
    WEB_PORT,
)
from replrepo.log import setup_logging
from replrepo.models import AuthSession, PROJECT_TYPES, UNSORTED_LIST_ID, User
from replrepo.services import (
    AccountService,
    ListingResult,
    ListingService,
    ListsService,
    RepoDetailService,
    ReviewService,
)
from replrepo.services.accounts import CONFIRM_EMAIL_FIRST
from replrepo.storage import Storage, SupabaseStorage

app = Flask(__name__)
app.secret_key = FLASK_SECRET_KEY

# Session cookie keys
SESSION_KEY = "auth"
PENDING_EMAIL_KEY = "pending_email"

NOT_CONFIGURED = "Supabase not configured"
SESSION_EXPIRED = "Your session has expired. Please sign in again."


# =============================================================================
# Backend Access
# =============================================================================

def get_storage(auth_session: Optional[AuthSession] = None) -> Optional[Storage]:
    """Get configured Supabase storage acting as the signed-in user."""
    if not SUPABASE_URL or not SUPABASE_KEY:
        return None
    return SupabaseStorage().with_session(auth_session)


def get_auth() -> Optional[AuthProvider]:
    """Get configured Supabase auth."""
    if not SUPABASE_URL or not SUPABASE_KEY:
        return None
    return SupabaseAuth()


def get_auth_session() -> Optional[AuthSession]:
    """
    The session stored in the signed cookie, if any.

    A session whose access token is about to expire is refreshed and written
    back to the cookie; one that cannot be refreshed is forgotten.
    """
    if "auth_session" not in g:
        auth_session = AuthSession.from_dict(session.get(SESSION_KEY))
        if auth_session is not None and auth_session.needs_refresh():
            auth_session = _refresh_auth_session(auth_session)
        g.auth_session = auth_session
    return g.auth_session


def _refresh_auth_session(auth_session: AuthSession) -> Optional[AuthSession]:
    auth = get_auth()
    refreshed = AccountService(auth).refresh_session(auth_session) if auth else None
    if refreshed is None:
        logger.info(f"Session for {auth_session.user.email} expired")
        session.pop(SESSION_KEY, None)
        flash(SESSION_EXPIRED, "error")
        return None
    session[SESSION_KEY] = refreshed.to_dict()
    return refreshed


def _drop_rejected_session(storage: Storage) -> bool:
    """
    Forget the cookie session if the data service refused its access token.

    Returns True when the session was dropped, so the caller can retry anonymously.
    """
    if not getattr(storage, "session_rejected", False):
        return False
    storage.session_rejected = False
    session.pop(SESSION_KEY, None)
    g.auth_session = None
    flash(SESSION_EXPIRED, "error")
    return True


def get_current_user() -> Optional[User]:
    auth_session = get_auth_session()
    return auth_session.user if auth_session else None


def _safe_next(default: str) -> str:
    """Redirect target from the form, restricted to paths on this site."""
    target = request.form.get("next") or ""
    if target.startswith("/") and not target.startswith("//"):
        return target
    return default


def _flash_result(result) -> None:
    if result.message:
        flash(result.message, "success" if result.success else "error")


@app.context_processor
def inject_user():
    return {"current_user": get_current_user()}


# =============================================================================
# Listing Page
# =============================================================================

def _load_listing() -> Optional[ListingResult]:
    """Load the filtered catalog, retrying anonymously if the session was refused."""
    storage = get_storage(get_auth_session())
    if not storage:
        return None

    query = request.args.get("q", "")
    project_type = request.args.get("type", ALL_TYPES)
    listing = ListingService(storage).load(query=query, project_type=project_type)
    if listing.error and _drop_rejected_session(storage):
        listing = ListingService(get_storage(None)).load(query=query, project_type=project_type)
    return listing


@app.route("/")
def index():
    """Main listing page."""
    listing = _load_listing()

    if listing is None:
        return render_template("error.html", message=NOT_CONFIGURED)

    if listing.error:
        return render_template("error.html", message=listing.error, can_refresh=True)

    return render_template(
        "index.html",
        listing=listing,
        project_types=PROJECT_TYPES,
        leaderboard=get_leaderboard(),
        pending_email=session.get(PENDING_EMAIL_KEY),
    )


@app.route("/api/projects")
def api_projects():
    """Search projects; used by the navbar as the user types."""
    listing = _load_listing()

    if listing is None:
        return jsonify({"error": NOT_CONFIGURED}), 500

    if listing.error:
        return jsonify({"success": False, "error": listing.error}), 502

    results = []
    for project in listing.filtered:
        data = project.to_dict()
        data["stars"] = star_breakdown(project.rating)
        results.append(data)

    return jsonify({
        "success": True,
        "query": listing.query,
        "type": listing.project_type,
        "count": len(results),
        "results": results,
    })


@app.route("/repos/<int:repo_id>/save", methods=["POST"])
def save_repo(repo_id):
    """Save a project into the user's default list."""
    auth_session = get_auth_session()
    storage = get_storage(auth_session)

    if not storage:
        return render_template("error.html", message=NOT_CONFIGURED)

    result = ListingService(storage).save_repo(get_current_user(), repo_id)
    if not _drop_rejected_session(storage):
        _flash_result(result)
    return redirect(_safe_next(url_for("index")))


# =============================================================================
# Authentication
# =============================================================================

@app.route("/auth/sign-in", methods=["POST"])
def sign_in():
    auth = get_auth()
    if not auth:
        return render_template("error.html", message=NOT_CONFIGURED)

    email = request.form.get("email", "")
    result = AccountService(auth).sign_in(email, request.form.get("password", ""))

    if result.success:
        session[SESSION_KEY] = result.data.to_dict()
        session.pop(PENDING_EMAIL_KEY, None)
    else:
        if result.message == CONFIRM_EMAIL_FIRST:
            session[PENDING_EMAIL_KEY] = email.strip()
        _flash_result(result)

    return redirect(url_for("index"))


@app.route("/auth/sign-up", methods=["POST"])
def sign_up():
    auth = get_auth()
    if not auth:
        return render_template("error.html", message=NOT_CONFIGURED)

    email = request.form.get("email", "")
    result = AccountService(auth).sign_up(email, request.form.get("password", ""))

    if result.success:
        if result.data is not None:
            session[SESSION_KEY] = result.data.to_dict()
        else:
            session[PENDING_EMAIL_KEY] = email.strip()
    _flash_result(result)

    return redirect(url_for("index"))


@app.route("/auth/sign-out", methods=["POST"])
def sign_out():
    auth = get_auth()
    if auth:
        _flash_result(AccountService(auth).sign_out(get_auth_session()))
    session.pop(SESSION_KEY, None)
    session.pop(PENDING_EMAIL_KEY, None)
    return redirect(url_for("index"))


@app.route("/auth/resend", methods=["POST"])
def resend_confirmation():
    auth = get_auth()
    if not auth:
        return render_template("error.html", message=NOT_CONFIGURED)

    email = request.form.get("email") or session.get(PENDING_EMAIL_KEY, "")
    _flash_result(AccountService(auth).resend_confirmation(email))
    return redirect(url_for("index"))


# =============================================================================
# Repo Detail Page
# =============================================================================

@app.route("/repo/<repo_id>")
def repo_detail(repo_id):
    """Detail page with the review panel."""
    storage = get_storage(get_auth_session())

    if not storage:
        return render_template("error.html", message=NOT_CONFIGURED)

    detail = RepoDetailService(storage).get(repo_id)
    if not detail.success and _drop_rejected_session(storage):
        storage = get_storage(None)
        detail = RepoDetailService(storage).get(repo_id)
    if not detail.success:
        return render_template("repo.html", repo=None, error=detail.error), 404

    reviews = ReviewService(storage).list_reviews(detail.repo.id)
    return render_template("repo.html", repo=detail.repo, error=None, reviews=reviews)


@app.route("/repo/<int:repo_id>/reviews", methods=["POST"])
def submit_review(repo_id):
    """Append a review written by the signed-in user."""
    auth_session = get_auth_session()
    storage = get_storage(auth_session)
    auth = get_auth()

    if not storage or not auth:
        return render_template("error.html", message=NOT_CONFIGURED)

    user = AccountService(auth).current_user(auth_session)
    result = ReviewService(storage).submit_review(
        user,
        repo_id,
        request.form.get("rating"),
        request.form.get("content", ""),
    )
    if not _drop_rejected_session(storage):
        _flash_result(result)
    return redirect(url_for("repo_detail", repo_id=repo_id))


# =============================================================================
# My Lists Page
# =============================================================================

def _lists_service() -> Optional[ListsService]:
    auth_session = get_auth_session()
    storage = get_storage(auth_session)
    if not storage:
        return None
    lists = ListsService(storage, get_current_user()).load()
    if lists.error and _drop_rejected_session(storage):
        return ListsService(storage, None)
    return lists


def _redirect_to_lists(lists: ListsService, result):
    if not _drop_rejected_session(lists.storage):
        _flash_result(result)
    return redirect(_safe_next(url_for("my_lists")))


@app.route("/my-lists")
def my_lists():
    """The user's lists and saved repos."""
    lists = _lists_service()

    if lists is None:
        return render_template("error.html", message=NOT_CONFIGURED)

    selected_id = request.args.get("list", type=int)
    selected = lists.get_list(selected_id)

    if lists.error:
        flash(lists.error, "error")

    return render_template(
        "my_lists.html",
        lists=lists,
        selected=selected,
        repos=lists.visible_repos(selected.id if selected else None),
        unsorted_id=UNSORTED_LIST_ID,
    )


@app.route("/my-lists", methods=["POST"])
def create_list():
    lists = _lists_service()
    if lists is None:
        return render_template("error.html", message=NOT_CONFIGURED)

    result = lists.create_list(request.form.get("name", ""), request.form.get("description", ""))
    return _redirect_to_lists(lists, result)


@app.route("/my-lists/repos/<int:repo_id>/move", methods=["POST"])
def move_repo(repo_id):
    lists = _lists_service()
    if lists is None:
        return render_template("error.html", message=NOT_CONFIGURED)

    new_list_id = request.form.get("list_id", type=int)
    if new_list_id is None:
        new_list_id = UNSORTED_LIST_ID

    result = lists.move_repo(repo_id, new_list_id)
    return _redirect_to_lists(lists, result)


@app.route("/my-lists/repos/<int:repo_id>/remove", methods=["POST"])
def remove_repo(repo_id):
    lists = _lists_service()
    if lists is None:
        return render_template("error.html", message=NOT_CONFIGURED)

    result = lists.remove_repo(repo_id)
    return _redirect_to_lists(lists, result)


# =============================================================================
# Template Filters
# =============================================================================

@app.template_filter("star_icons")
def star_icons(rating):
    """Star slots ("full", "half", "empty") for a rating."""
    return star_breakdown(rating)


@app.template_filter("format_rating")
def format_rating(rating):
    """Format a rating with one decimal, or N/A when unrated."""
    if rating is None:
        return "N/A"
    return f"{rating:.1f}"


@app.template_filter("format_timestamp")
def format_timestamp(dt):
    """Format datetime for display."""
    if not dt:
        return "Unknown"
    if isinstance(dt, str):
        return dt
    return dt.strftime("%b %d, %Y %H:%M")


@app.template_filter("format_uses")
def format_uses(uses):
    """Thousands separators for usage counts."""
    return f"{uses:,}"


if __name__ == "__main__":
    setup_logging()
    print("=" * 50)
    print("ReplRepo")
    print("=" * 50)
    print(f"Open http://localhost:{WEB_PORT} in your browser")
    print("Press Ctrl+C to stop")
    print("=" * 50)
    app.run(debug=DEBUG, port=WEB_PORT)
