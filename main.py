from flask import Flask, request, jsonify
from flask_cors import CORS
from academy_engine import AcademyProcessor
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes (the dashboard calls the API from the browser).
# Answer "*" like the Lambda handler instead of echoing the request origin.
CORS(app, send_wildcard=True)

# Initialize the processor
processor = AcademyProcessor()

# POST routes and the processor operation each one runs
ROUTES = {
    "/enrollments/pricing": processor.price_enrollment_from_dict,
    "/enrollments/payload": processor.build_enrollment_payload_from_dict,
    "/payouts/summary": processor.summarize_payout_from_dict,
    "/payouts/payload": processor.build_payout_payload_from_dict,
    "/payouts/preview-totals": processor.preview_totals_from_dict,
    "/incomes/convert": processor.convert_income_from_dict,
    "/incomes/payload": processor.build_income_payload_from_dict,
    "/incomes/summary": processor.summarize_incomes_from_dict,
    "/reports/totals": processor.report_totals_from_dict,
    "/reports/substitute-balance": processor.substitute_balance_from_dict,
}


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Academy Billing Engine API",
        "version": "1.0",
        "endpoints": {**{path: "[POST]" for path in ROUTES}, "health": "/health [GET]"}
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


def run_operation(path):
    """
    Run the processor operation bound to ``path`` on the request body
    """
    try:
        input_data = request.get_json(force=True, silent=True)

        if not input_data:
            return jsonify({
                "error": "No input data provided",
                "status": "failed"
            }), 400

        if not isinstance(input_data, dict):
            return jsonify({
                "error": "Request body must be a JSON object",
                "status": "failed"
            }), 400

        logger.info(f"Processing {path}")

        result = ROUTES[path](input_data)

        logger.info(f"Processed successfully: {path}")

        return jsonify(result), 200

    except (ValueError, KeyError, TypeError) as e:
        # Validation errors from engine
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "validation_failed"
        }), 400

    except Exception as e:
        # Unexpected errors
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        return jsonify({
            "error": "An unexpected error occurred during processing",
            "status": "failed"
        }), 500


for _path in ROUTES:
    app.add_url_rule(
        _path,
        endpoint=_path.strip("/").replace("/", "_").replace("-", "_"),
        view_func=lambda _path=_path: run_operation(_path),
        methods=["POST"],
    )


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
