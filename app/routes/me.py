"""
Me Routes - the signed-in user with every preference in one call
"""

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

me_bp = Blueprint("me", __name__, url_prefix="/api/me")


@me_bp.route("", methods=["GET"])
@me_bp.route("/", methods=["GET"])
@login_required
def get_me():
    return jsonify({"user": current_user.to_me_dict()})
