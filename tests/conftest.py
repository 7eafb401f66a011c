import os

# Set environment variables before any imports to disable AWS Lambda Powertools features
# This must be done before importing any service modules that use Tracer/Logger
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "test")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-west-2")
os.environ.setdefault("TABLE_NAME", "items-test")
os.environ.setdefault("PRIMARY_KEY", "id")


def pytest_configure(config):
    """
    Pytest hook that runs before test collection.
    Ensures environment variables are set before any service modules are imported.
    """
    os.environ["POWERTOOLS_TRACE_DISABLED"] = "true"
    os.environ["POWERTOOLS_SERVICE_NAME"] = "test"
    os.environ["AWS_DEFAULT_REGION"] = "us-west-2"
