"""
In-memory transport for the Twenty-One server, used for testing and simulation.

Every delivery is recorded instead of being sent anywhere, so tests can
inspect exactly which connection received which message.
"""

from collections import defaultdict
from typing import Any, Dict, List, Set, Tuple

from twentyone.server.transport import Transport


class DummyTransport(Transport):
    """
    Recording transport.

    `sent` holds (connection_id, message_type, data) for every delivery; a
    broadcast is recorded once per member connection.
    """

    def __init__(self, verbose: bool = False):
        """
        Initialize the dummy transport.

        Args:
            verbose: Whether to print deliveries to stdout (useful for debugging)
        """
        self.verbose = verbose
        self.groups: Dict[str, Set[str]] = defaultdict(set)
        self.sent: List[Tuple[str, str, Dict[str, Any]]] = []
        self.closed: Set[str] = set()

    async def send(
        self, connection_id: str, message_type: str, data: Dict[str, Any]
    ) -> bool:
        if connection_id in self.closed:
            return False
        self.sent.append((connection_id, message_type, data))
        if self.verbose:
            print(f"-> {connection_id}: {message_type} {data}")
        return True

    async def broadcast(
        self, group: str, message_type: str, data: Dict[str, Any]
    ) -> int:
        count = 0
        for connection_id in sorted(self.groups.get(group, ())):
            if await self.send(connection_id, message_type, data):
                count += 1
        return count

    async def add_to_group(self, connection_id: str, group: str) -> None:
        self.groups[group].add(connection_id)

    async def remove_from_group(self, connection_id: str, group: str) -> None:
        members = self.groups.get(group)
        if members is not None:
            members.discard(connection_id)
            if not members:
                del self.groups[group]

    def messages_for(self, connection_id: str, message_type: str = None) -> List[Dict[str, Any]]:
        """
        Get the payloads delivered to one connection, optionally of one type.
        """
        return [
            data
            for conn, typ, data in self.sent
            if conn == connection_id and (message_type is None or typ == message_type)
        ]

    def types_for(self, connection_id: str) -> List[str]:
        """Message types delivered to one connection, in order."""
        return [typ for conn, typ, _ in self.sent if conn == connection_id]

    def clear(self) -> None:
        """Forget every recorded delivery."""
        self.sent.clear()
