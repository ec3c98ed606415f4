"""Quart application serving family networks and citations."""

from quart import Quart, jsonify

from kalvian_roots import __version__
from kalvian_roots.api.families import families_bp
from kalvian_roots.context import RootsContext, build_context


def create_app(context: RootsContext | None = None) -> Quart:
    """Create and configure the Quart application.

    Args:
        context: Components to serve (default: built from settings)

    Returns:
        Configured Quart app
    """
    app = Quart(__name__)
    app.config["ROOTS_CONTEXT"] = context or build_context()

    app.register_blueprint(families_bp)
    register_routes(app)

    return app


def register_routes(app: Quart) -> None:
    """Register API routes.

    Args:
        app: Quart application
    """

    @app.route("/api/health", methods=["GET"])
    async def health_check():
        """Health check endpoint."""
        context: RootsContext = app.config["ROOTS_CONTEXT"]
        return jsonify(
            {
                "status": "healthy",
                "service": "kalvian-roots",
                "version": __version__,
                "registered_families": len(context.registry),
                "cached_families": context.cache.cached_family_count,
            }
        )

    @app.route("/api/info", methods=["GET"])
    async def info():
        """Get API information."""
        return jsonify(
            {
                "service": "Kalvian Roots API",
                "version": __version__,
                "endpoints": {
                    "health": "/api/health",
                    "network": "/api/families/<family_id>/network",
                    "citation": "/api/families/<family_id>/citation",
                    "cache_status": "/api/cache/status",
                    "prefetch": "/api/cache/prefetch",
                    "clans": "/api/clans",
                },
            }
        )
