from flask import Flask, jsonify, request

from zkecdsa import ffi
from zkecdsa.artifacts import BLOB_NAMES, ArtifactStore
from zkecdsa.circuit import relation_for
from zkecdsa.config import Settings
from zkecdsa.errors import ConfigError, PipelineStateError, ZkEcdsaError
from zkecdsa.pipeline import ProofPipeline

app = Flask(__name__)
app.config["ZKECDSA_SETTINGS"] = None


def current_settings():
    settings = app.config.get("ZKECDSA_SETTINGS")
    if settings is None:
        settings = Settings.from_env()
    return settings


def outcome_response(success, error_message=None):
    body = {"success": success, "errorMessage": error_message}
    return jsonify(body), (200 if success else 422)


@app.errorhandler(ConfigError)
def config_error(err):
    app.logger.warning("bad configuration: %s", err)
    return outcome_response(False, "{}: {}".format(err.kind, err))


def json_object_of_strings():
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or not all(isinstance(v, str) for v in body.values()):
        return None
    return body


@app.route("/", methods=["GET"])
def main():
    settings = current_settings()
    store = ArtifactStore(settings.artifacts)
    status = {name: store.exists(name) for name in BLOB_NAMES}
    status["witness"] = store.witness_exists()
    return jsonify({"variant": settings.variant, "artifacts": status})


@app.route("/setup", methods=["POST"])
def run_setup():
    """Compile the relation and persist the circuit with a fresh key pair."""
    settings = current_settings()
    try:
        pipeline = ProofPipeline(relation_for(settings.variant))
        pipeline.compile()
        pipeline.setup()
        pipeline.save(ArtifactStore(settings.artifacts))
    except (ZkEcdsaError, PipelineStateError) as err:
        app.logger.warning("setup failed: %s", err)
        return outcome_response(False, "{}: {}".format(err.kind, err))
    app.logger.info("setup %s saved", pipeline.verifying_key.setup_id)
    return outcome_response(True)


@app.route("/witness", methods=["POST"])
def save_witness():
    body = json_object_of_strings()
    if body is None:
        return jsonify({"success": False,
                        "errorMessage": "body must be a JSON object of hex strings"}), 400
    try:
        ArtifactStore(current_settings().artifacts).save_witness(body)
    except ZkEcdsaError as err:
        return outcome_response(False, "{}: {}".format(err.kind, err))
    return outcome_response(True)


@app.route("/proof/verify", methods=["POST"])
def verify_from_files():
    ffi.configure(current_settings())
    outcome = ffi.run_from_files()
    return outcome_response(outcome.success, outcome.error_message)


@app.route("/proof/verify/inputs", methods=["POST"])
def verify_with_inputs():
    body = json_object_of_strings()
    if body is None:
        return jsonify({"success": False,
                        "errorMessage": "body must be a JSON object of hex strings"}), 400
    ffi.configure(current_settings())
    outcome = ffi.run_with_inputs(body)
    return outcome_response(outcome.success, outcome.error_message)
