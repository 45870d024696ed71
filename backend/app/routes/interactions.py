"""
Interaction routes – the multi-drug check plus single-pair lookup,
manual save and delete.
"""

from flask import Blueprint, request

from app.errors import InvalidArgument, success_response
from app.services.container import get_services

interactions_bp = Blueprint("interactions", __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgument("Request body must be a JSON object.")
    return data


@interactions_bp.route("/check", methods=["POST"])
def check_interactions():
    """
    Check every pair among the given drugs, filling gaps from the model.
    Body: { "drugIds": [1, 2, 3] }
    """
    result = get_services().interactions.check_all(_json_body().get("drugIds"))
    result["interactions"] = [i.to_dict() for i in result["interactions"]]
    return success_response(result)


@interactions_bp.route("", methods=["GET"], strict_slashes=False)
def list_interactions():
    """
    Filtered listing; exactly one filter is expected:
    ?drugId=<id>, ?severity=low|medium|high or ?drug1Id=&drug2Id= (pair lookup).
    """
    resolver = get_services().interactions
    args = request.args
    if "drug1Id" in args or "drug2Id" in args:
        interaction = resolver.find(args.get("drug1Id"), args.get("drug2Id"))
        return success_response(interaction.to_dict() if interaction else None)
    if "drugId" in args:
        interactions = resolver.find_by_drug(args.get("drugId"))
    elif "severity" in args:
        interactions = resolver.find_by_severity(args.get("severity"))
    else:
        raise InvalidArgument("Provide 'drugId', 'severity' or 'drug1Id' and 'drug2Id'.")
    return success_response([i.to_dict() for i in interactions], count=len(interactions))


@interactions_bp.route("/<int:interaction_id>", methods=["GET"])
def get_interaction(interaction_id):
    return success_response(get_services().interactions.get(interaction_id).to_dict())


@interactions_bp.route("", methods=["POST"], strict_slashes=False)
def save_interaction():
    """Manual save; saving an already-stored pair returns the stored record."""
    interaction = get_services().interactions.save(_json_body())
    return success_response(interaction.to_dict(), status=201)


@interactions_bp.route("/<int:interaction_id>", methods=["DELETE"])
def delete_interaction(interaction_id):
    get_services().interactions.delete(interaction_id)
    return success_response({"id": interaction_id, "deleted": True})
