"""Modal application for Repo Agent.

This is the main entry point for deploying to Modal.

Run on Modal: modal serve modal_app.py
Deploy:       modal deploy modal_app.py

The web function serves the FastAPI app; every agent run creates its own
short-lived sandbox through repo_agent.services.modal_sandbox.
"""

import modal

app = modal.App("repo-agent")

web_image = (
    modal.Image.debian_slim(python_version="3.11")
    .pip_install(
        "fastapi>=0.115.0",
        "pydantic-settings>=2.6.0",
        "httpx>=0.27.0",
        "pyjwt[cryptography]>=2.8.0",
        "cryptography>=41.0.0",
        "litellm>=1.50.0",
        "modal>=0.66.0",
    )
    .add_local_python_source("repo_agent")
)


@app.function(
    image=web_image,
    secrets=[modal.Secret.from_name("repo-agent-secrets")],
    min_containers=1,
    timeout=900,  # a full run (up to max_steps model calls) plus sandbox setup
)
@modal.concurrent(max_inputs=50)
@modal.asgi_app()
def fastapi_app():
    """FastAPI web application running on Modal."""
    from repo_agent.main import app as fastapi_instance

    return fastapi_instance
