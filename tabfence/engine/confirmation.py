"""Apply the user's answer from the confirmation page."""

from __future__ import annotations

from tabfence.isolation.hosts import domain_of

from .exemptions import ExemptionTracker
from .membership import GroupMembershipManager
from .messages import RedirectRequest
from .redirects import Redirector


class ConfirmationResolver:
    def __init__(
        self,
        exemptions: ExemptionTracker,
        membership: GroupMembershipManager,
        redirector: Redirector,
    ) -> None:
        self.exemptions = exemptions
        self.membership = membership
        self.redirector = redirector

    async def resolve(self, request: RedirectRequest) -> None:
        # The exemption must exist before the re-navigation reaches decide().
        if request.exempt:
            self.exemptions.grant(request.tab_id, domain_of(request.redirect_url))

        if request.move_group:
            await self.membership.move_tab_to_group(
                request.tab_id,
                request.group_id,
                request.redirect_url,
                request.original_url,
            )
        else:
            await self.redirector.redirect_tab(request.tab_id, request.redirect_url, request.original_url)
