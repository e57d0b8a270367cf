"""
Flask-based Web API for soldocgen.

Resolves compiler output posted as JSON and serves a previously written
documentation bundle.

Endpoints:
    GET  /api/health   - Health check endpoint
    POST /api/resolve  - Resolve one contract's output into its documentation
    POST /api/generate - Resolve every contract in a build-info document
    GET  /<path>       - Files from the configured bundle directory
"""

from pathlib import Path
from typing import Any, Optional

from flask import Flask, Response, abort, jsonify, request, send_from_directory

from soldocgen import __version__
from soldocgen.artifacts import BuildInfoStore
from soldocgen.errors import ArtifactError
from soldocgen.renderer import INDEX_FILE
from soldocgen.resolver import resolve_all, resolve_contract
from soldocgen.schema import docs_to_dict

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = 50 * 1024 * 1024  # build-info files get large
app.config["BUNDLE_DIR"] = None


def _json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ArtifactError("Request body must be a JSON object")
    return data


@app.route("/api/health", methods=["GET"])
def health_check() -> Response:
    """Health check endpoint."""
    return jsonify({"status": "healthy", "version": __version__})


@app.route("/api/resolve", methods=["POST"])
def resolve() -> tuple[Response, int]:
    """
    Resolve a single contract.

    Request JSON:
        - contract: "<sourcePath>:<contractName>"
        - output: the compiler's per-contract output (abi, devdoc, userdoc)
        - strict: bool (default: false)

    Returns:
        JSON with the resolved contract record and any warnings
    """
    try:
        data = _json_body()
        contract_name = data.get("contract")
        output = data.get("output")
        if not isinstance(contract_name, str):
            return jsonify({"error": "'contract' is required"}), 400
        if not isinstance(output, dict):
            return jsonify({"error": "'output' must be an object"}), 400

        doc = resolve_contract(contract_name, output, strict=bool(data.get("strict", False)))
    except ArtifactError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"success": True, "contract": doc.to_dict(), "warnings": doc.warnings}), 200


@app.route("/api/generate", methods=["POST"])
def generate() -> tuple[Response, int]:
    """
    Resolve every contract in a posted build-info document.

    Optional query parameters:
        - strict: "true" to fail on duplicate signatures

    Returns:
        JSON with all records keyed by fully-qualified name
    """
    strict = request.args.get("strict", "false").lower() == "true"
    try:
        store = BuildInfoStore(_json_body())
        docs = resolve_all(store, strict=strict)
    except ArtifactError as e:
        return jsonify({"error": str(e)}), 400

    warnings = [w for doc in docs.values() for w in doc.warnings]
    return jsonify({"success": True, "contracts": docs_to_dict(docs), "warnings": warnings}), 200


@app.route("/", defaults={"path": INDEX_FILE})
@app.route("/<path:path>")
def bundle_file(path: str):
    """Serve a file from the bundle directory."""
    bundle_dir = app.config.get("BUNDLE_DIR")
    if not bundle_dir:
        abort(404)
    return send_from_directory(bundle_dir, path)


@app.errorhandler(404)
def not_found(error):
    """Handle missing resources."""
    return jsonify({"error": "Not found"}), 404


@app.errorhandler(413)
def request_entity_too_large(error):
    """Handle file too large errors."""
    return jsonify({"error": "Request too large. Maximum size is 50MB."}), 413


@app.errorhandler(500)
def internal_server_error(error):
    """Handle internal server errors."""
    return jsonify({"error": "Internal server error"}), 500


def create_app(bundle_dir: Optional[str | Path] = None) -> Flask:
    """
    Application factory.

    Args:
        bundle_dir: Bundle directory to serve under "/" (optional)

    Returns:
        Configured Flask application instance.
    """
    app.config["BUNDLE_DIR"] = str(Path(bundle_dir).resolve()) if bundle_dir else None
    return app


def main() -> None:
    """Run the development server, serving ./docgen if it exists."""
    bundle_dir = Path("docgen")
    create_app(bundle_dir if bundle_dir.is_dir() else None)

    print("Starting soldocgen API server...")
    print()
    print("API Endpoints:")
    print("  POST /api/resolve  - Resolve one contract's compiler output")
    print("  POST /api/generate - Resolve a whole build-info document")
    print("  GET  /api/health   - Health check")
    print()
    app.run(host="127.0.0.1", port=5001, debug=True)


if __name__ == "__main__":
    main()
