"""Style plugin rendering a view as an iCal feed."""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

from processor.feed_renderer import FeedRenderer
from processor.models import MAPPING_OPTIONS, EventDraft, FieldMapping, ViewResult

logger = logging.getLogger(__name__)

FEED_MEDIA_TYPE = 'application/calendar'


class IcalStyle:
    """Display the results of a view as an iCal feed."""
    
    def __init__(self, options: Dict[str, Any], renderer: FeedRenderer):
        """
        Initialize the style plugin.
        
        Args:
            options: Field options (date_field, summary_field, ...)
            renderer: Renderer producing the event drafts
        """
        self.options = {**self.define_options(), **options}
        self.renderer = renderer
    
    @staticmethod
    def define_options() -> Dict[str, Optional[str]]:
        """Default value of every option the plugin understands."""
        return {option: None for option in MAPPING_OPTIONS}
    
    def render(self, view: ViewResult, viewer_timezone: str) -> List[EventDraft]:
        """
        Render the view rows as event drafts.
        
        Args:
            view: Executed view
            viewer_timezone: Timezone identifier of the requesting user
            
        Returns:
            Event drafts, or an empty list when no row plugin is configured
        """
        if not view.row_plugin:
            logger.warning("IcalStyle: Missing row plugin, rendering an empty feed")
            return []

        mapping = FieldMapping.from_options(self.options)
        return self.renderer.render(
            view.rows,
            mapping,
            view.entity_type,
            viewer_timezone,
            view.date_field_settings
        )
    
    def attach_to(
        self,
        build: Dict[str, Any],
        feed_url: str,
        title: str,
        exposed_input: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Attach an alternate link pointing at the feed to a page build.
        
        Exposed filter input is carried over as the feed URL query.
        
        Args:
            build: Page build dict, modified in place
            feed_url: Absolute URL of the feed
            title: Link title
            exposed_input: Exposed filter values of the current request
            
        Returns:
            The build dict
        """
        href = feed_url
        if exposed_input:
            parts = urlsplit(feed_url)
            href = urlunsplit(parts._replace(query=urlencode(exposed_input, doseq=True)))

        links = build.setdefault('attached', {}).setdefault('html_head_link', [])
        links.append({
            'rel': 'alternate',
            'type': FEED_MEDIA_TYPE,
            'href': href,
            'title': title
        })
        return build
