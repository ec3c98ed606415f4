"""Family network, citation and cache API endpoints."""

import logging

from quart import Blueprint, Response, current_app, jsonify, request

from kalvian_roots.citations import EventType, HiskiQuery
from kalvian_roots.context import RootsContext
from kalvian_roots.errors import (
    HiskiError,
    HiskiRecordNotFound,
    InvalidIdentifier,
    NotFound,
    ParseFailure,
    RootsError,
)
from kalvian_roots.schemas import FamilyNetwork, Person

logger = logging.getLogger(__name__)

families_bp = Blueprint("families", __name__)

_ERROR_STATUS = {
    InvalidIdentifier: (400, "invalid_identifier"),
    NotFound: (404, "not_found"),
    ParseFailure: (502, "parse_failure"),
}


def _context() -> RootsContext:
    return current_app.config["ROOTS_CONTEXT"]


@families_bp.errorhandler(RootsError)
async def handle_roots_error(error: RootsError) -> tuple[Response, int]:
    """Turn a failure to load the requested family into a generic error response."""
    status, reason = _ERROR_STATUS.get(type(error), (500, "error"))
    logger.warning("Request failed: %s", error)
    return (
        jsonify(
            {
                "error": "Could not load family",
                "reason": reason,
                "family_id": getattr(error, "family_id", None),
            }
        ),
        status,
    )


@families_bp.route("/api/families/<family_id>/network", methods=["GET"])
async def get_network(family_id: str) -> Response:
    """Resolve a family and its cross-referenced families.

    Query parameters:
        - cross_references: "false" for the nuclear family only

    Returns:
        JSON with the network and its resolution time
    """
    context = _context()
    resolve = request.args.get("cross_references", "true").lower() != "false"
    was_cached = context.cache.is_cached(family_id)

    network = await context.cache.get_or_resolve(family_id, resolve_cross_references=resolve)
    entry = context.cache.get_cached_entry(family_id)

    return jsonify(
        {
            "family_id": context.registry.normalize(family_id),
            "cached": was_cached,
            "extraction_time": entry.extraction_time if entry else None,
            "resolved_families": network.total_resolved_families,
            "network": network.model_dump(mode="json"),
        }
    )


def _find_person(network: FamilyNetwork, name: str, birth_date: str | None) -> Person | None:
    family = network.main_family
    for person in family.all_persons:
        if name.lower() not in (person.name.lower(), person.display_name.lower()):
            continue
        if birth_date is None or person.birth_date == birth_date:
            return person
    return None


@families_bp.route("/api/families/<family_id>/citation", methods=["POST"])
async def create_citation(family_id: str) -> Response | tuple[Response, int]:
    """Generate a citation for a person in a family.

    Request body:
        - person: Name or display name of the person (omit for the family itself)
        - birth_date: Optional birth date to pick between namesakes

    Returns:
        JSON with the citation text
    """
    context = _context()
    data = await request.get_json(silent=True) or {}
    name = (data.get("person") or "").strip()

    network = await context.cache.get_or_resolve(family_id)

    if not name:
        citation = context.citations.generate_main_family_citation(
            network.main_family, network=network
        )
        return jsonify({"family_id": network.family_id, "citation": citation})

    person = _find_person(network, name, data.get("birth_date"))
    if person is not None:
        citation = context.citations.generate_citation(person, network)
    elif name in network.spouse_as_child_families:
        citation = context.citations.generate_spouse_citation(
            name, network.spouse_as_child_families[name]
        )
    else:
        return jsonify({"error": f"{name} not found in {network.family_id}"}), 404

    return jsonify({"family_id": network.family_id, "person": name, "citation": citation})


@families_bp.route("/api/families/<family_id>/hiski", methods=["GET"])
async def hiski_record(family_id: str) -> Response | tuple[Response, int]:
    """Build the HisKi search for a person's church record.

    Query parameters:
        - person: Name or display name of the person
        - event: birth, death, marriage, baptism or burial (default: birth)
        - lookup: "true" to fetch the record's citation link from HisKi

    Returns:
        JSON with the query and, when looked up, the citation
    """
    context = _context()
    name = request.args.get("person", "").strip()
    try:
        event = EventType(request.args.get("event", "birth").lower())
    except ValueError:
        return jsonify({"error": f"Unknown event {request.args.get('event')!r}"}), 400

    network = await context.cache.get_or_resolve(family_id, resolve_cross_references=False)
    family = network.main_family
    person = family.find_person(name) if name else None
    if person is None:
        return jsonify({"error": f"{name} not found in {family.family_id}"}), 404

    query = HiskiQuery.from_person(person, event)
    if query is None:
        return jsonify({"error": f"{name} has no {event.value} date to search"}), 422

    couple = family.find_couple_for_child(person)
    parent_birth_year = couple.older_parent_birth_year if couple else None
    body = {
        "family_id": family.family_id,
        "person": name,
        "event": event.value,
        "description": query.description,
        "query_url": query.query_url,
        "search_url": context.hiski.search_url(query, parent_birth_year),
    }
    if request.args.get("lookup", "false").lower() != "true":
        return jsonify(body)

    try:
        citation = await context.hiski.query(query, parent_birth_year)
    except HiskiRecordNotFound as e:
        return jsonify({**body, "error": str(e)}), 404
    except HiskiError as e:
        logger.warning("HisKi lookup failed: %s", e)
        return jsonify({**body, "error": str(e)}), 502

    return jsonify({**body, "citation": citation.model_dump(mode="json")})


@families_bp.route("/api/cache/status", methods=["GET"])
async def cache_status() -> Response:
    """Get background processing status, or one family's status with ?family_id=."""
    cache = _context().cache
    family_id = request.args.get("family_id")
    status = cache.family_status(family_id) if family_id else cache.status()
    return jsonify(status.to_dict())


@families_bp.route("/api/cache/prefetch", methods=["POST"])
async def start_prefetch() -> tuple[Response, int]:
    """Start prefetching the families after the given one."""
    context = _context()
    data = await request.get_json(silent=True) or {}
    family_id = (data.get("family_id") or "").strip()
    if not context.registry.is_valid(family_id):
        raise InvalidIdentifier(family_id)

    context.cache.start_background_processing(family_id)
    return jsonify(context.cache.status().to_dict()), 202


@families_bp.route("/api/cache/<family_id>", methods=["DELETE"])
async def remove_cached(family_id: str) -> Response:
    cache = _context().cache
    cache.remove_from_cache(family_id)
    return jsonify({"removed": family_id, "cached_count": cache.cached_family_count})


@families_bp.route("/api/cache", methods=["DELETE"])
async def clear_cache() -> Response:
    cache = _context().cache
    cache.clear_cache()
    return jsonify({"cleared": True, "cached_count": cache.cached_family_count})


@families_bp.route("/api/clans", methods=["GET"])
async def list_clans() -> Response:
    """List family IDs grouped by clan."""
    groups = _context().registry.grouped_by_clan()
    return jsonify(
        [{"clan": group.clan, "family_ids": group.family_ids} for group in groups]
    )
