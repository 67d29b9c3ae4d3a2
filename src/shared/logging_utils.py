"""
Colored console logging for the GitHub login flow.

Each component gets an OAuthLogger that prints timestamped, color-coded
message blocks showing which party talks to which (browser, web app, GitHub),
with secrets redacted and tokens truncated.
"""

from datetime import datetime
from typing import Dict, Any, Optional
from enum import Enum

from colorama import Fore, Style, init

init(autoreset=True)


class ComponentType(str, Enum):
    """Parties taking part in the login flow."""
    WEB_APP = "WEB-APP"
    GITHUB = "GITHUB"
    USER_BROWSER = "USER-BROWSER"
    SYSTEM = "SYSTEM"


REDACTED_KEYS = ('password', 'secret', 'key')
TRUNCATED_KEYS = ('token', 'code', 'state')


class OAuthLogger:
    """
    Colored logger for OAuth message flows.

    Output goes to stdout so the redirect and exchange steps of a login can be
    followed from the terminal running the server.
    """

    def __init__(self, component_name: str):
        """
        Initialize the logger for a component.

        Args:
            component_name: Name of the component (WEB-APP, SYSTEM, ...)
        """
        self.component_name = component_name.upper()
        self.colors = self._get_component_colors()

    def _get_component_colors(self) -> Dict[str, str]:
        return {
            'WEB-APP': Fore.BLUE + Style.BRIGHT,
            'GITHUB': Fore.GREEN + Style.BRIGHT,
            'USER-BROWSER': Fore.YELLOW + Style.BRIGHT,
            'SYSTEM': Fore.MAGENTA + Style.BRIGHT,
            'ERROR': Fore.RED + Style.BRIGHT,
            'SUCCESS': Fore.GREEN + Style.BRIGHT,
            'INFO': Fore.CYAN,
            'HEADER': Fore.WHITE + Style.BRIGHT,
            'SEPARATOR': Fore.WHITE + Style.DIM,
            'RESET': Style.RESET_ALL
        }

    def _format_timestamp(self) -> str:
        """Format current timestamp for log messages."""
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

    def _sanitize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sanitize sensitive data for logging.

        Redacts secrets and truncates tokens, codes and state values.
        """
        sanitized = {}
        for key, value in data.items():
            key_lower = key.lower()

            if any(sensitive in key_lower for sensitive in REDACTED_KEYS):
                sanitized[key] = '[REDACTED]'
            elif any(token in key_lower for token in TRUNCATED_KEYS):
                if isinstance(value, str) and len(value) > 10:
                    sanitized[key] = f"{value[:10]}..."
                else:
                    sanitized[key] = value
            else:
                sanitized[key] = value

        return sanitized

    def log_oauth_message(self,
                          source: str,
                          destination: str,
                          message_type: str,
                          data: Dict[str, Any],
                          success: bool = True):
        """
        Log a message exchanged between two parties.

        Args:
            source: Source component name
            destination: Destination component name
            message_type: Short description of the message
            data: Message data dictionary
            success: Whether the operation was successful
        """
        timestamp = self._format_timestamp()
        source_color = self.colors.get(source.upper(), self.colors['INFO'])
        dest_color = self.colors.get(destination.upper(), self.colors['INFO'])

        if not success:
            msg_color = self.colors['ERROR']
        elif message_type in ['RESPONSE', 'SUCCESS']:
            msg_color = self.colors['SUCCESS']
        else:
            msg_color = self.colors['INFO']

        header = f"{self.colors['HEADER']}[{timestamp}] {source_color}{source}{self.colors['RESET']} → {dest_color}{destination}{self.colors['RESET']}"
        print(header)

        print(f"{msg_color}{message_type}:{self.colors['RESET']}")

        for key, value in self._sanitize_data(data).items():
            print(f"  {self.colors['INFO']}{key}:{self.colors['RESET']} {value}")

        print(f"{self.colors['SEPARATOR']}{'-' * 60}{self.colors['RESET']}")
        print()

    def log_token_operation(self,
                            operation: str,
                            details: Dict[str, Any],
                            success: bool = True):
        """
        Log token-related operations.

        Args:
            operation: Token operation (exchange, storage, ...)
            details: Operation details
            success: Whether operation was successful
        """
        self.log_oauth_message(
            source=self.component_name,
            destination=ComponentType.GITHUB.value,
            message_type=f"TOKEN-{operation.upper()}",
            data=details,
            success=success
        )

    def log_error(self,
                  error_type: str,
                  message: str,
                  details: Optional[Dict[str, Any]] = None):
        """
        Log error messages with context.

        Args:
            error_type: Type of error
            message: Error message
            details: Additional error context
        """
        error_data = {
            "error_type": error_type,
            "message": message
        }

        if details:
            error_data.update(details)

        self.log_oauth_message(
            source=self.component_name,
            destination="ERROR-HANDLER",
            message_type="ERROR",
            data=error_data,
            success=False
        )

    def log_startup(self, port: int, additional_info: Optional[Dict[str, Any]] = None):
        """
        Log component startup information.

        Args:
            port: Port number the component is actually bound to
            additional_info: Additional startup information
        """
        print(f"{self.colors['SUCCESS']}HTTP server started on port: {port}{self.colors['RESET']}")
        if additional_info:
            for key, value in self._sanitize_data(additional_info).items():
                print(f"   {key}: {value}")
        print(f"{self.colors['SEPARATOR']}{'-' * 60}{self.colors['RESET']}")
        print()

