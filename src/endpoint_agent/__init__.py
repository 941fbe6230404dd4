from endpoint_agent.run import run_scan

__all__ = ["run_scan"]
