"""
Graph routes – node/edge projection for the visualisation and the
aggregate statistics built on it. Read-only.
"""

from flask import Blueprint, request

from app.errors import success_response
from app.services.container import get_services

graph_bp = Blueprint("graph", __name__)


@graph_bp.route("/graph", methods=["GET"])
def drug_graph():
    """Whole graph, or the 1-hop neighbourhood with ?drugId=<id>."""
    return success_response(get_services().graph.project(request.args.get("drugId")))


@graph_bp.route("/graph/stats", methods=["GET"])
def graph_stats():
    return success_response(get_services().graph.stats())


@graph_bp.route("/<int:drug_id>/interactions/stats", methods=["GET"])
def drug_interaction_stats(drug_id):
    return success_response(get_services().graph.drug_stats(drug_id))
