"""MultiSites - Site Resolver.

Turns a request's site pattern into a concrete site set, and decides which
sites the "all" sentinel stands for during that request.
"""

from typing import Optional

from multisites.models.report_models import SiteContext, SiteSet
from multisites.sites.directory import SiteDirectory
from multisites.sites.search import SiteSearch
from multisites.core.logging import get_logger

logger = get_logger("sites.resolver")


def resolve_sites(pattern: Optional[str], site_search: SiteSearch) -> SiteSet:
    """Resolve a name/id pattern into a site set.

    No pattern means every site. A pattern matching nothing yields an empty
    set, which callers report as "no data".
    """
    if not pattern:
        return SiteSet.all()

    matches = site_search.match_pattern(pattern)
    site_set = SiteSet.of(m["idsite"] for m in matches)
    logger.info(f"Pattern '{pattern}' matched {len(site_set.ids)} sites")
    return site_set


def prepare_site_context(
    site_set: SiteSet,
    restrict_to_login: Optional[str],
    is_super_user: bool,
    is_scheduled_task: bool,
    directory: SiteDirectory,
    login: Optional[str] = None,
) -> SiteContext:
    """Build the request-local site scope.

    A super user asking for all sites gets every known site, except while a
    scheduled task runs: scheduled tasks execute with super user rights, so
    they always get the sites viewable by the restricted login instead.

    `restrict_to_login` is only honored for super users, scheduled tasks, or
    when it names the caller; anyone else gets their own viewable sites.
    """
    if site_set.all_sites and is_super_user and not is_scheduled_task:
        return SiteContext(site_ids=directory.all_sites().ids)

    effective_login = login
    if restrict_to_login:
        if is_super_user or is_scheduled_task or restrict_to_login == login:
            effective_login = restrict_to_login
        else:
            logger.warning(f"Ignoring restrict_to_login '{restrict_to_login}' for '{login}'")
    return SiteContext(site_ids=directory.viewable_sites(effective_login).ids)
