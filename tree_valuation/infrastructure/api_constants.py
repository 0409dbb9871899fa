"""
Factor source constants.

Centralizes the request headers and markup locations used when downloading
the official tree value calculator page.
"""


class FactorPageLocators:
    """Where the species factors live inside the calculator page."""

    # XPath template for the option list; format with the select id
    SELECT_OPTIONS = "//select[@id='{select_id}']//option"

    @classmethod
    def options_for(cls, select_id: str) -> str:
        """
        Get the option XPath for a given select element.

        Args:
            select_id: id attribute of the <select> element

        Returns:
            XPath expression selecting its <option> children
        """
        return cls.SELECT_OPTIONS.format(select_id=select_id)


class APIConstants:
    """General HTTP configuration constants."""

    # The page rejects requests that do not look like a browser
    BROWSER_HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/116.0.0.0 Safari/537.36"
        ),
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9,he;q=0.8",
        "Cache-Control": "no-cache",
    }
