"""HowLongToBeat lookups via the howlongtobeatpy library."""

from typing import Any, Dict, Optional

from howlongtobeatpy import HowLongToBeat

from reelshelf.services.logging_service import logger, app_metrics


class HLTBAPI:
    """
    Completion-time lookups.

    HowLongToBeat has no official API and rate limits aggressively, so every
    failure is reported as "no data" instead of raising.
    """

    service_name = "hltb"

    def __init__(self, client: Optional[HowLongToBeat] = None):
        self.client = client or HowLongToBeat()

    def get_best_match(self, game_name: str) -> Optional[Dict[str, Any]]:
        """
        Find the most similar HowLongToBeat entry for a game name.

        Args:
            game_name: Game title to look up

        Returns:
            Dict with game_id, game_name, image_url, similarity and the
            main/main_extra/completionist hours, or None when nothing usable
            was found or the lookup failed
        """
        if not game_name or not game_name.strip():
            return None

        try:
            results = self.client.search(game_name.strip())
        except Exception as e:
            # Library raises a mix of aiohttp, parsing and HTTP errors
            app_metrics.increment_upstream(self.service_name, success=False)
            logger.warning("HowLongToBeat lookup failed", game_name=game_name, error=str(e))
            return None

        app_metrics.increment_upstream(self.service_name, success=True)

        if not results:
            return None

        best = max(results, key=lambda entry: entry.similarity or 0)

        return {
            "game_id": getattr(best, "game_id", None),
            "game_name": best.game_name,
            "image_url": getattr(best, "game_image_url", None),
            "similarity": best.similarity,
            "main": _hours(best.main_story),
            "main_extra": _hours(best.main_extra),
            "completionist": _hours(best.completionist),
            "platforms": list(getattr(best, "profile_platforms", None) or []),
        }


def _hours(value) -> Optional[float]:
    if not value:
        return None
    return round(float(value), 1)
