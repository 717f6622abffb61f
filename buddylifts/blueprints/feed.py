from flask import Blueprint, jsonify, request

from ..auth import current_user, login_required
from ..errors import BadRequest
from ..services.feed import FEED_FILTERS, build_feed, group_feed

bp = Blueprint("feed", __name__, url_prefix="/feed")


@bp.get("/")
@login_required
def feed():
    """Trainings von mir und meinen Freunden (?filter=all|upcoming|past, ?grouped=1)."""
    feed_filter = request.args.get("filter", "all")
    if feed_filter not in FEED_FILTERS:
        raise BadRequest(f"filter must be one of: {', '.join(FEED_FILTERS)}")

    items = build_feed(current_user().id, feed_filter)
    if request.args.get("grouped") == "1":
        return jsonify(group_feed(items))
    return jsonify(items)
