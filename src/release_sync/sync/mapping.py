"""Team and user display-name mapping."""

from dataclasses import dataclass

from ..models import Platform


@dataclass(frozen=True)
class TeamMapping:
    """Maps a tracker team name to the name shown in the report."""

    original_team_name: str
    display_name: str


@dataclass(frozen=True)
class UserMapping:
    """Maps platform user handles to one display name."""

    display_name: str
    gitlab_user_id: str | None = None
    bitbucket_user_id: str | None = None
    github_user_id: str | None = None

    def user_id_for(self, platform: Platform) -> str | None:
        """Return the handle configured for ``platform``."""
        if platform == Platform.GITLAB:
            return self.gitlab_user_id
        if platform == Platform.BITBUCKET:
            return self.bitbucket_user_id
        if platform == Platform.GITHUB:
            return self.github_user_id
        return None


class TeamMapper:
    """Team display names and team-based filtering.

    With no mappings configured every team is accepted and names pass
    through unchanged.
    """

    def __init__(self, mappings: list[TeamMapping] | None = None):
        self._display_names = {
            mapping.original_team_name.casefold(): mapping.display_name
            for mapping in mappings or []
        }

    @property
    def filtering_enabled(self) -> bool:
        return bool(self._display_names)

    def has_mapping(self, team: str | None) -> bool:
        if not self.filtering_enabled:
            return True

        if not team or not team.strip():
            return False

        return team.casefold() in self._display_names

    def display_name(self, team: str | None) -> str | None:
        if not team or not team.strip():
            return team
        return self._display_names.get(team.casefold(), team)


class UserMapper:
    """Resolves author display names from platform handles."""

    def __init__(self, mappings: list[UserMapping] | None = None):
        self.mappings = list(mappings or [])

    def display_name(
        self,
        platform: Platform,
        handle: str | None,
        default: str | None = None,
    ) -> str:
        """Return the mapped display name for a platform handle.

        Falls back to ``default``, then the handle itself. A blank handle
        maps to ``default`` or ``"Unknown"``.
        """
        if not handle or not handle.strip():
            return default or "Unknown"

        wanted = handle.casefold()
        for mapping in self.mappings:
            user_id = mapping.user_id_for(platform)
            if user_id is not None and user_id.casefold() == wanted:
                return mapping.display_name

        return default or handle
