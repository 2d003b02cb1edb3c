class DashboardException(Exception):
    """Base exception for all dashboard-related errors."""
    pass

class ConfigurationException(DashboardException):
    """Raised when the project list or environment cannot be loaded."""
    pass

class ProviderException(DashboardException):
    """Raised when a provider API returns something we cannot use."""
    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"[{provider}] {message}")
