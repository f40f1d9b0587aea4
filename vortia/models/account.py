"""Connected social account record (simulated OAuth)."""

from dataclasses import dataclass


@dataclass
class ConnectedAccount:
    platform: str
    account_id: str
    account_name: str
    credential: str | None = None
    connected: bool = True

    def to_dict(self) -> dict:
        # Only presence of the credential is exposed.
        return {
            "platform": self.platform,
            "accountId": self.account_id,
            "accountName": self.account_name,
            "connected": self.connected,
            "hasCredential": bool(self.credential),
        }
