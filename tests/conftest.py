import os
import platform

from hypothesis import HealthCheck, settings

# tags are built from whole in-memory buffers, keep examples small
settings.register_profile(
    "default",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow])

if "CI" in os.environ:
    # CI can be slow, so be patient
    # Also we can run more tests there

    max_examples = settings.default.max_examples * 5
    if platform.python_implementation() == "PyPy":
        # PyPy is too slow
        max_examples = settings.default.max_examples

    settings.register_profile(
        "ci",
        deadline=settings.default.deadline * 10,
        max_examples=max_examples)
    settings.load_profile("ci")
else:
    settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))
