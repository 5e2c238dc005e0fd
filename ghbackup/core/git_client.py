"""Small helper for running git clone against the backup working directory."""

from __future__ import annotations

import base64
import os
import subprocess

from .constants import CLONE_USERNAME
from .deadline import Deadline
from .utils import mask_secret

POLL_INTERVAL_SEC = 0.5
KILL_GRACE_SEC = 5


class GitClient:
    def __init__(self, git: str = "git") -> None:
        self.git = git

    @staticmethod
    def auth_env(token: str, username: str = CLONE_USERNAME) -> dict[str, str]:
        """git config passed through the environment: a basic-auth header for every HTTP request.

        Nothing lands in argv or in the clone's .git/config.
        """
        basic = base64.b64encode(f"{username}:{token}".encode("utf-8")).decode("ascii")
        return {
            "GIT_CONFIG_COUNT": "1",
            "GIT_CONFIG_KEY_0": "http.extraHeader",
            "GIT_CONFIG_VALUE_0": f"Authorization: Basic {basic}",
        }

    # ---------- process helpers ----------
    def _run(self, cmd: list[str], deadline: Deadline, extra_env: dict[str, str]) -> tuple[bool, str | None]:
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        env.update(extra_env)
        try:
            proc = subprocess.Popen(
                cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, env=env, text=True
            )
        except OSError as e:
            return False, f"{e}"

        while True:
            try:
                _out, err = proc.communicate(timeout=POLL_INTERVAL_SEC)
                break
            except subprocess.TimeoutExpired:
                if deadline.expired():
                    proc.terminate()
                    try:
                        proc.communicate(timeout=KILL_GRACE_SEC)
                    except subprocess.TimeoutExpired:
                        proc.kill()
                        proc.communicate()
                    return False, "cancelled: deadline exceeded"

        if proc.returncode != 0:
            return False, (err or "").strip() or f"git exited with status {proc.returncode}"
        return True, None

    # ---------- clone ----------
    def clone(
        self,
        url: str,
        target: str,
        *,
        token: str | None,
        deadline: Deadline | None = None,
    ) -> tuple[bool, str | None]:
        """Full clone of the default branch of ``url`` into ``target``."""
        deadline = deadline or Deadline(None)
        if deadline.expired():
            return False, "cancelled: deadline exceeded"
        # empty credential.helper so a bad token fails fast instead of prompting
        cmd = [self.git, "-c", "credential.helper=", "clone", url, target]
        ok, err = self._run(cmd, deadline, self.auth_env(token) if token else {})
        return ok, mask_secret(err, token) if err else err
