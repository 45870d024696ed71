"""
Drug routes – paginated listing, search, manual CRUD and the
cache-or-fetch analysis endpoint.
"""

from flask import Blueprint, request

from app.errors import InvalidArgument, success_response
from app.services.container import get_services

drugs_bp = Blueprint("drugs", __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgument("Request body must be a JSON object.")
    return data


@drugs_bp.route("", methods=["GET"], strict_slashes=False)
def list_drugs():
    """Paginated list, newest first. Query: ?page=1&limit=10"""
    result = get_services().drugs.list_page(
        request.args.get("page"), request.args.get("limit"),
    )
    return success_response(
        [d.to_dict() for d in result["drugs"]],
        pagination={
            "page": result["page"],
            "limit": result["limit"],
            "total": result["total"],
            "totalPages": result["totalPages"],
        },
    )


@drugs_bp.route("/search", methods=["GET"])
def search_drugs():
    """Case-insensitive substring search over name and generic name."""
    drugs = get_services().drugs.search(request.args.get("name", ""))
    return success_response([d.to_dict() for d in drugs], count=len(drugs))


@drugs_bp.route("/analyze", methods=["POST"])
def analyze_drug():
    """
    Return the stored drug, or ask the model and store the result.
    Body: { "name": "Aspirin" }
    """
    drug, source = get_services().drugs.resolve(_json_body().get("name"))
    data = drug.to_dict()
    data["source"] = source
    return success_response(data)


@drugs_bp.route("/<int:drug_id>", methods=["GET"])
def get_drug(drug_id):
    return success_response(get_services().drugs.get(drug_id).to_dict())


@drugs_bp.route("", methods=["POST"], strict_slashes=False)
def create_drug():
    drug = get_services().drugs.create(_json_body())
    return success_response(drug.to_dict(), status=201)


@drugs_bp.route("/<int:drug_id>", methods=["PATCH", "PUT"])
def update_drug(drug_id):
    drug = get_services().drugs.update(drug_id, _json_body())
    return success_response(drug.to_dict())


@drugs_bp.route("/<int:drug_id>", methods=["DELETE"])
def delete_drug(drug_id):
    get_services().drugs.delete(drug_id)
    return success_response({"id": drug_id, "deleted": True})
