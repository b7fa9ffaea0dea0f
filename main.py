from flask import Flask, request, jsonify
from flask_cors import CORS
from dealdesk import DealProcessor
from dealdesk.faq import FaqMatcher
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes (deal submission forms call the API from the browser)
CORS(app)

# Calculation engine and FAQ matcher are stateless
processor = DealProcessor()
faq = FaqMatcher()


def _run(label: str, handler):
    """Parse the JSON body, run a processor method and map errors to responses."""
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

        logger.info(f"{label}: {input_data.get('deal_name', 'request received')}")

        result = handler(input_data)

        logger.info(f"{label} completed")

        return jsonify(result), 200

    except (ValueError, KeyError, TypeError) as e:
        # Bad deal input
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


@app.route("/", methods=["GET"])
@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Deal Desk Calculation API",
        "version": "1.0",
        "endpoints": {
            "process_deal": "/process_deal [POST]",
            "tier_metrics": "/tier_metrics [POST]",
            "approval_level": "/approval_level [POST]",
            "approval_sequence": "/approval_sequence [POST]",
            "approval_status": "/approval_status [POST]",
            "chat": "/chat [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


@app.route("/process_deal", methods=["POST"])
def process_deal():
    """
    Evaluate a deal: tier metrics, approval level and approval workflow
    """
    return _run("Processing deal", processor.process_from_dict)


@app.route("/tier_metrics", methods=["POST"])
def tier_metrics():
    return _run("Calculating tier metrics", processor.tier_metrics_from_dict)


@app.route("/approval_level", methods=["POST"])
def approval_level():
    return _run("Resolving approval level", processor.approval_level_from_dict)


@app.route("/approval_sequence", methods=["POST"])
def approval_sequence():
    return _run("Resolving approval sequence", processor.approval_sequence_from_dict)


@app.route("/approval_status", methods=["POST"])
def approval_status():
    return _run("Computing approval status", processor.approval_status_from_dict)


@app.route("/chat", methods=["POST"])
def chat():
    """Keyword-matched FAQ answers"""
    return _run("Answering question", lambda data: {"answer": faq.answer(data.get("message", ""))})


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
