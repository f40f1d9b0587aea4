"""Connected-account store.

``connect`` stands in for an OAuth handshake: it always succeeds and
fabricates an account id. A credential can be attached so that the
dispatcher switches the platform to live mode.
"""

import logging
import threading
import time

from vortia.models.account import ConnectedAccount
from vortia.models.publish_job import Platform

logger = logging.getLogger(__name__)

# Where a real OAuth app has to be registered for each platform
OAUTH_CONSOLE_URLS = {
    Platform.YOUTUBE: "https://console.cloud.google.com/apis/credentials",
    Platform.INSTAGRAM: "https://developers.facebook.com/apps",
    Platform.FACEBOOK: "https://developers.facebook.com/apps",
    Platform.TIKTOK: "https://developers.tiktok.com/",
    Platform.TWITTER: "https://developer.twitter.com/en/portal/dashboard",
    Platform.LINKEDIN: "https://www.linkedin.com/developers/apps",
}


class ConnectedAccountStore:
    def __init__(self):
        self._accounts: dict[Platform, ConnectedAccount] = {}
        self._lock = threading.Lock()

    def connect(self, platform: Platform, credential: str | None = None) -> ConnectedAccount:
        account = ConnectedAccount(
            platform=platform.value,
            account_id=f"acc_{platform.value}_{int(time.time() * 1000)}",
            account_name=f"{platform.value} Account",
            credential=credential or None,
            connected=True,
        )
        with self._lock:
            self._accounts[platform] = account
        logger.info(
            "Connected %s account %s (credential=%s)",
            platform.value,
            account.account_id,
            "yes" if account.credential else "no",
        )
        return account

    def get(self, platform: Platform) -> ConnectedAccount | None:
        with self._lock:
            return self._accounts.get(platform)

    def credential_for(self, platform: Platform) -> str | None:
        account = self.get(platform)
        if account and account.connected:
            return account.credential
        return None

    def list(self) -> list[ConnectedAccount]:
        with self._lock:
            return list(self._accounts.values())
