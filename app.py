"""
Gradio web interface for face age estimation.

Run with: python app.py
"""

import os
from typing import Optional

import gradio as gr
import numpy as np

# Check if running in HF Spaces
IS_HF_SPACE = os.environ.get("SPACE_ID") is not None

from face_age import (  # noqa: E402
    AGE_LABELS,
    AgeEstimator,
    Config,
    EstimationStatus,
    FaceAgeError,
    Image,
    RequestSequencer,
)
from face_age.log import setup_logging  # noqa: E402
from face_age.visualize import draw_region  # noqa: E402

config = Config.from_env()
setup_logging(config.log_level)

# Process-wide estimator; models load in the background so the UI comes up at once
estimator = AgeEstimator(config)
estimator.start_loading()

# A new upload supersedes whatever request was still running
_sequencer = RequestSequencer()


def detect_face(image: np.ndarray) -> tuple[Optional[np.ndarray], Optional[tuple], str]:
    """
    Locate a face in an uploaded image.

    Args:
        image: Uploaded image as RGB numpy array

    Returns:
        Tuple of (highlighted image, session state, status text)
    """
    if image is None:
        return None, None, "Please upload an image"

    token = _sequencer.begin()
    try:
        captured = Image.from_array(image, "RGB")
        detection = estimator.detect(captured, token)
    except FaceAgeError as e:
        return image, None, f"Error: {e.message}"

    if not detection.found:
        return image, (captured, detection), "No face found in this image"

    highlighted = draw_region(captured, detection.selected)
    return highlighted, (captured, detection), (
        f"Found {len(detection.regions)} face(s). Press **Estimate Age**."
    )


def estimate_age(state: Optional[tuple]) -> str:
    """Estimate the age bracket for the face held in session state."""
    if state is None:
        return "Please upload an image first"
    if not estimator.wait_until_ready(timeout=0):
        error = estimator.age_model.last_error
        if error is not None:
            return f"Error: {error.message}"
        return "Models are still loading, try again in a moment"

    captured, detection = state
    if not detection.found:
        return "No face found in this image"

    result = estimator.estimate(captured, detection.selected, _sequencer.begin())

    if result.status is EstimationStatus.ESTIMATED:
        return f"**Estimated Age:** {result.label}"
    if result.status is EstimationStatus.CANCELLED:
        return "Request superseded by a newer one"
    return f"Error: {result.error.message}"


def create_demo() -> gr.Blocks:
    """Create the Gradio demo interface."""

    with gr.Blocks(title="Face Age Estimation") as demo:
        gr.Markdown(
            f"""
            # Face Age Estimation

            Upload a photo; the first detected frontal face is highlighted, then
            press **Estimate Age** to classify it.

            **Age Brackets:** {", ".join(AGE_LABELS)}
            """
        )

        session = gr.State(None)

        with gr.Row():
            with gr.Column(scale=1):
                image_input = gr.Image(label="Pick Image", type="numpy", height=300)
                estimate_btn = gr.Button("Estimate Age", variant="primary", size="lg")

            with gr.Column(scale=1):
                detection_output = gr.Image(label="Detected Face", height=300)
                result_text = gr.Markdown(label="Result")

        # Detect as soon as an image is picked
        image_input.change(
            fn=detect_face,
            inputs=[image_input],
            outputs=[detection_output, session, result_text],
        )

        estimate_btn.click(fn=estimate_age, inputs=[session], outputs=[result_text])

    return demo


# Create the demo
demo = create_demo()

if __name__ == "__main__":
    demo.launch(
        server_name="0.0.0.0",
        server_port=7860,
        share=IS_HF_SPACE,  # Auto-share if running in HF Spaces
        show_error=True,
    )
