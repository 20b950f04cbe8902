"""
Crawl engine: URL normalization, frontier/dedup admission, fetch and extract.

Submodules are imported explicitly (``site_crawler.crawler.crawler`` etc.);
this package does not re-export them so that ``site_crawler.config`` can
depend on the leaf modules without an import cycle.
"""
