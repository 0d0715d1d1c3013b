#!/usr/bin/env python3
"""
Host List Aggregator v1.0

Builds a single deduplicated DNS filter list from many remote host lists.

Features:
- Blocklist sources discovered from a tiered CSV manifest (firebog format)
- Allowlist sources from a static set or a pipe-delimited sources file
- Multi-threaded downloads using requests
- Pi-hole and Unbound output dialects
- Previous output kept as a .bak file
"""

import os
import re
import sys
import csv
import time
import logging
import argparse
import functools
import ipaddress
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple
from dataclasses import dataclass, field
from urllib.parse import urlparse
from concurrent.futures import ThreadPoolExecutor, as_completed, TimeoutError as FuturesTimeoutError

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from tqdm import tqdm

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

VERSION = "1.0"
USER_AGENT = f"hostlist-aggregator/{VERSION}"

DEFAULT_MANIFEST_URL = "https://v.firebog.net/hosts/csv.txt"
DEFAULT_TIER_PATTERN = "tick"
KNOWN_TIERS = ("tick", "std", "cross")

MODES = ("block", "allow")
OUTPUT_STYLES = ("pihole", "unbound")

DEFAULT_OUTPUT_FILES = {
    ("pihole", "block"): "blocklist.txt",
    ("pihole", "allow"): "allowlist.txt",
    ("unbound", "block"): "unbound_blocklist.conf",
    ("unbound", "allow"): "unbound_allowlist.conf",
}

DEFAULT_SINKHOLE_ADDRESS = "0.0.0.0"
BACKUP_SUFFIX = ".bak"

MIN_THREADS = 1
MAX_THREADS = 16
DEFAULT_THREADS = 8
DEFAULT_TIMEOUT = 30

DEFAULT_RETRIES = 0
RETRY_BACKOFF = 0.5
RETRY_STATUS_CODES = [429, 500, 502, 503, 504]

MAX_DOMAIN_LENGTH = 253
MANIFEST_COLUMNS = 5
SINKHOLE_PREFIXES = ("0.0.0.0", "127.0.0.1")

# Loopback names found at the top of most hosts files
LOCAL_HOSTNAMES = frozenset({
    "localhost", "localhost.localdomain", "local", "broadcasthost",
    "ip6-localhost", "ip6-loopback",
})

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

# Pre-compiled regex patterns
DOMAIN_PATTERN = re.compile(
    r'^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z0-9][a-zA-Z0-9-]{0,61}[a-zA-Z0-9]$'
)
# Characters a hostname token may contain; anything else (quotes, slashes,
# markup, adblock syntax) would corrupt the rendered output
HOSTNAME_CHARS_PATTERN = re.compile(r'^[a-z0-9_.-]+$')

# ============================================================================
# EXCEPTIONS
# ============================================================================


class AggregatorError(Exception):
    """Base class for errors that end a run."""


class ConfigError(AggregatorError):
    """Invalid configuration or sources file."""


class FetchError(AggregatorError):
    """A URL could not be retrieved."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ManifestParseError(AggregatorError):
    """The source manifest does not have the expected layout."""


class PublishError(AggregatorError):
    """The output artifact or its backup could not be written."""


class RunDeadlineExceeded(AggregatorError):
    """Fetching did not finish within the configured run timeout."""


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class SourceDescriptor:
    """A single host list source."""
    category: str
    tier: str
    description: str
    url: str


@dataclass
class FetchResult:
    """Outcome of fetching one URL.

    A failed fetch still carries a body: a single comment line which the
    normalizer drops, so failed sources contribute nothing downstream.
    """
    url: str
    body: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, url: str, error: str) -> "FetchResult":
        return cls(url=url, body=f"# no data returned from {url}", error=error)


@dataclass
class RunStats:
    """Counters for a single run."""
    mode: str
    sources: int = 0
    succeeded: int = 0
    failed: int = 0
    entries_seen: int = 0
    unique_entries: int = 0
    output_file: Optional[str] = None
    backup_file: Optional[str] = None
    failed_sources: List[Tuple[str, str]] = field(default_factory=list)
    elapsed_time: Optional[str] = None


@dataclass
class Config:
    """Configuration for one aggregation run."""
    mode: str = "block"
    output_style: str = "pihole"
    output_file: Optional[str] = None
    tier_pattern: str = DEFAULT_TIER_PATTERN
    manifest_url: str = DEFAULT_MANIFEST_URL
    sources_file: Optional[str] = None
    sinkhole_address: str = DEFAULT_SINKHOLE_ADDRESS
    threads: int = DEFAULT_THREADS
    timeout: int = DEFAULT_TIMEOUT
    run_timeout: Optional[float] = None
    retries: int = DEFAULT_RETRIES
    validate_domains: bool = False
    dry_run: bool = False
    quiet: bool = False
    verbose: bool = False
    log_file: Optional[str] = None

    def __post_init__(self):
        if self.mode not in MODES:
            raise ConfigError(f"unknown mode '{self.mode}', expected one of {', '.join(MODES)}")
        if self.output_style not in OUTPUT_STYLES:
            raise ConfigError(f"unknown output style '{self.output_style}', "
                              f"expected one of {', '.join(OUTPUT_STYLES)}")
        if not self.output_file:
            self.output_file = DEFAULT_OUTPUT_FILES[(self.output_style, self.mode)]
        self.threads = max(MIN_THREADS, min(self.threads, MAX_THREADS))
        if self.timeout <= 0:
            self.timeout = DEFAULT_TIMEOUT
        if self.run_timeout is not None and self.run_timeout <= 0:
            self.run_timeout = None
        self.retries = max(0, self.retries)


# Static allowlist sources used when no sources file is given
DEFAULT_ALLOWLIST_SOURCES: Tuple[SourceDescriptor, ...] = (
    SourceDescriptor(
        category="allow",
        tier="static",
        description="Commonly whitelisted domains",
        url="https://raw.githubusercontent.com/anudeepND/whitelist/master/domains/whitelist.txt",
    ),
    SourceDescriptor(
        category="allow",
        tier="static",
        description="Optional whitelist",
        url="https://raw.githubusercontent.com/anudeepND/whitelist/master/domains/optional-list.txt",
    ),
    SourceDescriptor(
        category="allow",
        tier="static",
        description="Referral sites",
        url="https://raw.githubusercontent.com/anudeepND/whitelist/master/domains/referral-sites.txt",
    ),
)


# ============================================================================
# LINE NORMALIZER
# ============================================================================

@functools.lru_cache(maxsize=10000)
def validate_domain(domain: str) -> bool:
    """Validate a domain name."""
    if not domain or domain == 'localhost' or domain.endswith('.local'):
        return False
    if len(domain) > MAX_DOMAIN_LENGTH:
        return False
    return bool(DOMAIN_PATTERN.match(domain))


def is_ip_literal(token: str) -> bool:
    try:
        ipaddress.ip_address(token)
        return True
    except ValueError:
        return False


def extract_hostname_from_line(line: str) -> Optional[str]:
    """Extract a canonical hostname from one hosts-style line.

    Handles blank lines, full-line and inline comments, IPv6 null routes and
    the 0.0.0.0 / 127.0.0.1 prefixes of hosts files. Returns None when the
    line carries no hostname, or when the token holds characters no hostname
    can contain (HTML, URLs, adblock rules).
    """
    line = line.strip()
    if not line or line.startswith('::') or line.startswith('#'):
        return None

    if '#' in line:
        line = line[:line.index('#')]

    tokens = line.split()
    if tokens and tokens[0] in SINKHOLE_PREFIXES:
        tokens = tokens[1:]
    if not tokens:
        return None

    hostname = tokens[0].lower().rstrip('.')
    if not hostname or hostname in LOCAL_HOSTNAMES or is_ip_literal(hostname):
        return None
    if not HOSTNAME_CHARS_PATTERN.match(hostname):
        return None
    return hostname


def normalize(body: str, validate: bool = False) -> Iterator[str]:
    """Yield canonical hostnames from a raw list body."""
    for line in body.splitlines():
        hostname = extract_hostname_from_line(line)
        if hostname is None:
            continue
        if validate and not validate_domain(hostname):
            logger.debug(f"Dropping invalid domain: {hostname}")
            continue
        yield hostname


# ============================================================================
# OUTPUT DIALECTS
# ============================================================================

@dataclass(frozen=True)
class OutputDialect:
    """Renders a hostname into one or more output lines.

    Templates use ``{hostname}`` and ``{address}`` placeholders.
    """
    name: str
    templates: Tuple[str, ...]
    address: str = DEFAULT_SINKHOLE_ADDRESS

    def render_lines(self, hostname: str) -> Tuple[str, ...]:
        return tuple(t.format(hostname=hostname, address=self.address) for t in self.templates)

    def render(self, hostname: str) -> str:
        return "\n".join(self.render_lines(hostname))


DIALECTS: Dict[str, OutputDialect] = {
    "pihole-block": OutputDialect("pihole-block", ("{address}\t{hostname}",)),
    "pihole-allow": OutputDialect("pihole-allow", ("{hostname}",)),
    "unbound-block": OutputDialect("unbound-block", (
        'local-zone: "{hostname}" redirect',
        'local-data: "{hostname}. IN A 0.0.0.0"',
        'local-data: "{hostname}. IN AAAA ::"',
    )),
    "unbound-allow": OutputDialect("unbound-allow", ('local-zone: "{hostname}" always_transparent',)),
}


def get_dialect(output_style: str, mode: str,
                sinkhole_address: str = DEFAULT_SINKHOLE_ADDRESS) -> OutputDialect:
    """Select the dialect for an output style and block/allow mode."""
    name = f"{output_style}-{mode}"
    if name not in DIALECTS:
        raise ConfigError(f"no output dialect for style '{output_style}' and mode '{mode}'")
    dialect = DIALECTS[name]
    if sinkhole_address != dialect.address:
        if not is_ip_literal(sinkhole_address):
            raise ConfigError(f"sinkhole address '{sinkhole_address}' is not an IP address")
        dialect = OutputDialect(dialect.name, dialect.templates, sinkhole_address)
    return dialect


# ============================================================================
# CONTENT FETCHER
# ============================================================================

class ContentFetcher:
    """HTTP client that never lets a single source failure end the run."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT, retries: int = DEFAULT_RETRIES):
        self.timeout = timeout
        self.retries = retries
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a session with retry logic."""
        session = requests.Session()
        retry = Retry(
            total=self.retries,
            backoff_factor=RETRY_BACKOFF,
            status_forcelist=RETRY_STATUS_CODES,
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers['User-Agent'] = USER_AGENT
        return session

    def fetch_or_raise(self, url: str) -> str:
        """Return the body of ``url`` or raise FetchError."""
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e
        return response.content.decode('utf-8', errors='ignore')

    def fetch(self, url: str) -> FetchResult:
        try:
            return FetchResult(url=url, body=self.fetch_or_raise(url))
        except FetchError as e:
            return FetchResult.failed(url, e.reason)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ContentFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


# ============================================================================
# PIPELINE EVENTS
# ============================================================================

class PipelineEvents:
    """Hooks called by the pipeline. The base class does nothing."""

    def sources_resolved(self, sources: List[SourceDescriptor]) -> None:
        pass

    def fetch_finished(self, source: SourceDescriptor, result: FetchResult, entries: int) -> None:
        pass

    def aggregated(self, unique_entries: int) -> None:
        pass

    def aborted(self, error: Exception) -> None:
        pass

    def published(self, target: str, backup: Optional[str], entries: int) -> None:
        pass


class LoggingEvents(PipelineEvents):
    """Reports pipeline progress through the module logger."""

    def sources_resolved(self, sources: List[SourceDescriptor]) -> None:
        logger.info(f"Selected {len(sources)} sources")

    def fetch_finished(self, source: SourceDescriptor, result: FetchResult, entries: int) -> None:
        if result.ok:
            logger.info(f"  [ok]  {source.url}: {entries:,} entries")
        else:
            logger.warning(f"  [err] {source.url}: {result.error}")

    def aggregated(self, unique_entries: int) -> None:
        logger.info(f"Aggregated {unique_entries:,} unique entries")

    def published(self, target: str, backup: Optional[str], entries: int) -> None:
        if backup:
            logger.info(f"Previous output moved to {backup}")
        logger.info(f"Wrote {entries:,} entries to {target}")


class ProgressEvents(LoggingEvents):
    """Logging events plus a tqdm progress bar over downloads."""

    def __init__(self):
        self.bar: Optional[tqdm] = None

    def sources_resolved(self, sources: List[SourceDescriptor]) -> None:
        super().sources_resolved(sources)
        self.bar = tqdm(total=len(sources), desc="Downloading", leave=False)

    def fetch_finished(self, source: SourceDescriptor, result: FetchResult, entries: int) -> None:
        if self.bar is not None:
            self.bar.update(1)
        if not result.ok:
            super().fetch_finished(source, result, entries)
        else:
            logger.debug(f"  [ok]  {source.url}: {entries:,} entries")

    def _close_bar(self) -> None:
        if self.bar is not None:
            self.bar.close()
            self.bar = None

    def aggregated(self, unique_entries: int) -> None:
        self._close_bar()
        super().aggregated(unique_entries)

    def aborted(self, error: Exception) -> None:
        self._close_bar()


# ============================================================================
# SOURCE MANIFEST RESOLVER
# ============================================================================

def parse_manifest(text: str) -> List[SourceDescriptor]:
    """Parse a five-column category,tier,origin,description,url manifest.

    A leading header row is skipped if present.
    """
    sources: List[SourceDescriptor] = []
    reader = csv.reader(text.splitlines())
    for line_num, record in enumerate(reader, 1):
        if not record or all(not col.strip() for col in record):
            continue
        if len(record) != MANIFEST_COLUMNS:
            raise ManifestParseError(
                f"line {line_num}: expected {MANIFEST_COLUMNS} columns, got {len(record)}"
            )
        category, tier, _origin, description, url = [col.strip() for col in record]
        if not sources and url.lower() == 'url':
            continue
        sources.append(SourceDescriptor(category=category, tier=tier, description=description, url=url))
    return sources


def filter_by_tier(sources: Iterable[SourceDescriptor], tier_pattern: str) -> List[SourceDescriptor]:
    """Keep sources whose tier matches ``tier_pattern`` (regex search)."""
    try:
        pattern = re.compile(tier_pattern)
    except re.error as e:
        raise ConfigError(f"invalid tier pattern '{tier_pattern}': {e}") from e
    return [s for s in sources if pattern.search(s.tier)]


def resolve_sources(fetcher: ContentFetcher, manifest_url: str,
                    tier_pattern: str = DEFAULT_TIER_PATTERN) -> List[SourceDescriptor]:
    """Fetch the manifest and return the sources in the selected tiers.

    A manifest that cannot be fetched raises FetchError.
    """
    logger.info(f"Loading source manifest from {manifest_url}")
    text = fetcher.fetch_or_raise(manifest_url)
    sources = parse_manifest(text)
    selected = filter_by_tier(sources, tier_pattern)
    logger.info(f"Manifest lists {len(sources)} sources, {len(selected)} match tier '{tier_pattern}'")
    return selected


def load_sources_file(path: str) -> List[SourceDescriptor]:
    """Load sources from a ``url|description|category`` file."""
    if not os.path.exists(path):
        raise ConfigError(f"sources file '{path}' not found")

    sources: List[SourceDescriptor] = []
    with open(path, 'r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()

            if not line or line.startswith('#'):
                continue

            parts = [p.strip() for p in line.split('|')]
            if len(parts) != 3:
                logger.warning(f"Invalid format in line {line_num}: {line}")
                continue

            url, description, category = parts
            result = urlparse(url)
            if not all([result.scheme, result.netloc]):
                logger.warning(f"Invalid URL in line {line_num}: {url}")
                continue

            sources.append(SourceDescriptor(
                category=category,
                tier="static",
                description=description,
                url=url,
            ))

    if not sources:
        raise ConfigError(f"no valid sources found in '{path}'")

    logger.info(f"Loaded {len(sources)} sources from {path}")
    return sources


# ============================================================================
# AGGREGATOR
# ============================================================================

def aggregate(sources: List[SourceDescriptor], dialect: OutputDialect, fetcher: ContentFetcher,
              threads: int = DEFAULT_THREADS, events: Optional[PipelineEvents] = None,
              deadline: Optional[float] = None, validate: bool = False,
              stats: Optional[RunStats] = None) -> Set[str]:
    """Fetch every source concurrently and fold the rendered entries into one set.

    Only the calling thread touches the result set.

    ``deadline`` bounds how long this call waits for results. Queued fetches
    are cancelled when it expires, but requests already in flight keep their
    worker thread until they finish or hit the per-request timeout, and the
    interpreter joins those threads at exit. Process wall-clock time is
    therefore bounded by ``deadline`` plus the request timeout, not by
    ``deadline`` alone.
    """
    events = events or PipelineEvents()
    rendered: Set[str] = set()
    if not sources:
        events.aggregated(0)
        return rendered

    workers = max(MIN_THREADS, min(threads, MAX_THREADS, len(sources)))
    executor = ThreadPoolExecutor(max_workers=workers)
    timed_out = False
    try:
        futures = {executor.submit(fetcher.fetch, source.url): source for source in sources}
        try:
            for future in as_completed(futures, timeout=deadline):
                source = futures[future]
                result = future.result()

                count = 0
                for hostname in normalize(result.body, validate=validate):
                    rendered.add(dialect.render(hostname))
                    count += 1

                if stats is not None:
                    if result.ok:
                        stats.succeeded += 1
                    else:
                        stats.failed += 1
                        stats.failed_sources.append((source.url, result.error))
                    stats.entries_seen += count
                events.fetch_finished(source, result, count)
        except FuturesTimeoutError:
            timed_out = True
            error = RunDeadlineExceeded(f"fetching did not finish within {deadline} seconds")
            events.aborted(error)
            raise error
    finally:
        # Abandon in-flight downloads once the deadline has passed
        executor.shutdown(wait=not timed_out, cancel_futures=timed_out)

    events.aggregated(len(rendered))
    return rendered


# ============================================================================
# PUBLISHER
# ============================================================================

def publish(target: str, content: Iterable[str]) -> Optional[str]:
    """Write ``content`` to ``target``, moving any existing file to ``target.bak``.

    Returns the backup path, or None when there was nothing to back up. The
    rename happens before the write, so a crash in between leaves only the
    backup behind.
    """
    backup: Optional[str] = None
    try:
        parent = os.path.dirname(target)
        if parent:
            os.makedirs(parent, exist_ok=True)

        if os.path.isdir(target):
            raise PublishError(f"failed to publish {target}: target is a directory")

        if os.path.exists(target):
            backup = target + BACKUP_SUFFIX
            os.replace(target, backup)

        with open(target, 'w', encoding='utf-8') as f:
            for entry in sorted(content):
                f.write(f"{entry}\n")
    except OSError as e:
        raise PublishError(f"failed to publish {target}: {e}") from e
    return backup


# ============================================================================
# PIPELINE
# ============================================================================

def select_sources(config: Config, fetcher: ContentFetcher) -> List[SourceDescriptor]:
    """Pick the sources for a run based on mode and overrides."""
    if config.sources_file:
        return load_sources_file(config.sources_file)
    if config.mode == "block":
        return resolve_sources(fetcher, config.manifest_url, config.tier_pattern)
    return list(DEFAULT_ALLOWLIST_SOURCES)


def run(config: Config, fetcher: Optional[ContentFetcher] = None,
        events: Optional[PipelineEvents] = None) -> RunStats:
    """Run the full fetch, normalize, aggregate and publish pipeline."""
    start_time = time.time()
    events = events or PipelineEvents()
    stats = RunStats(mode=config.mode, output_file=config.output_file)
    dialect = get_dialect(config.output_style, config.mode, config.sinkhole_address)

    owns_fetcher = fetcher is None
    if fetcher is None:
        fetcher = ContentFetcher(timeout=config.timeout, retries=config.retries)

    try:
        sources = select_sources(config, fetcher)
        stats.sources = len(sources)
        events.sources_resolved(sources)

        entries = aggregate(
            sources, dialect, fetcher,
            threads=config.threads,
            events=events,
            deadline=config.run_timeout,
            validate=config.validate_domains,
            stats=stats,
        )
        stats.unique_entries = len(entries)
    finally:
        if owns_fetcher:
            fetcher.close()

    if config.dry_run:
        logger.info(f"[DRY RUN] Would write {len(entries):,} entries to {config.output_file}")
    else:
        stats.backup_file = publish(config.output_file, entries)
        events.published(config.output_file, stats.backup_file, len(entries))

    stats.elapsed_time = f"{time.time() - start_time:.2f} seconds"
    return stats


def run_blocklist(config: Config, fetcher: Optional[ContentFetcher] = None,
                  events: Optional[PipelineEvents] = None) -> RunStats:
    if config.mode != "block":
        raise ConfigError("run_blocklist requires mode 'block'")
    return run(config, fetcher, events)


def run_allowlist(config: Config, fetcher: Optional[ContentFetcher] = None,
                  events: Optional[PipelineEvents] = None) -> RunStats:
    if config.mode != "allow":
        raise ConfigError("run_allowlist requires mode 'allow'")
    return run(config, fetcher, events)


# ============================================================================
# CLI
# ============================================================================

def setup_logging(verbose: bool = False, quiet: bool = False,
                  log_file: Optional[str] = None) -> logging.Logger:
    """Attach console (and optional file) handlers to the module logger."""
    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.ERROR)
    else:
        logger.setLevel(logging.INFO)

    if logger.handlers:
        return logger

    fmt = logging.Formatter(LOG_FORMAT)

    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    if log_file:
        fh = logging.FileHandler(log_file, encoding='utf-8')
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def parse_arguments(argv: Optional[List[str]] = None) -> Config:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description=f"Host List Aggregator v{VERSION}",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument("mode", choices=MODES,
                        help="Build a blocklist or an allowlist")
    parser.add_argument("-s", "--style", choices=OUTPUT_STYLES, default="pihole",
                        help="Output style")
    parser.add_argument("-o", "--output", default=None,
                        help="Output file (default depends on mode and style)")
    parser.add_argument("--tier", default=DEFAULT_TIER_PATTERN,
                        help=f"Regex selecting manifest tiers, e.g. {'|'.join(KNOWN_TIERS)}")
    parser.add_argument("--manifest-url", default=DEFAULT_MANIFEST_URL,
                        help="Blocklist source manifest")
    parser.add_argument("--sources-file", default=None,
                        help="Sources file (url|description|category per line)")
    parser.add_argument("--sinkhole", default=DEFAULT_SINKHOLE_ADDRESS,
                        help="Address used by pihole block entries")
    parser.add_argument("-t", "--threads", type=int, default=DEFAULT_THREADS,
                        help=f"Download threads ({MIN_THREADS}-{MAX_THREADS})")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT,
                        help="HTTP timeout in seconds")
    parser.add_argument("--run-timeout", type=float, default=None,
                        help="Overall download deadline in seconds")
    parser.add_argument("--retries", type=int, default=DEFAULT_RETRIES,
                        help="HTTP retries per source")
    parser.add_argument("--strict", action="store_true",
                        help="Drop entries that are not valid domain names")
    parser.add_argument("--dry-run", action="store_true",
                        help="Dry run mode")
    parser.add_argument("--log-file", default=None,
                        help="Also write log output to this file")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Verbose logging")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Quiet mode")
    parser.add_argument("--version", action="version", version=f"Host List Aggregator v{VERSION}")

    args = parser.parse_args(argv)

    return Config(
        mode=args.mode,
        output_style=args.style,
        output_file=args.output,
        tier_pattern=args.tier,
        manifest_url=args.manifest_url,
        sources_file=args.sources_file,
        sinkhole_address=args.sinkhole,
        threads=args.threads,
        timeout=args.timeout,
        run_timeout=args.run_timeout,
        retries=args.retries,
        validate_domains=args.strict,
        dry_run=args.dry_run,
        quiet=args.quiet,
        verbose=args.verbose,
        log_file=args.log_file,
    )


def print_summary(stats: RunStats) -> None:
    print("\n" + "=" * 60)
    print(" " * 25 + "SUMMARY")
    print("=" * 60)
    print(f"Mode:               {stats.mode}")
    print(f"Sources:            {stats.sources}")
    print(f"Successful:         {stats.succeeded}")
    print(f"Failed:             {stats.failed}")
    print(f"Entries seen:       {stats.entries_seen:,}")
    print(f"Unique entries:     {stats.unique_entries:,}")
    print(f"Output:             {stats.output_file}")
    if stats.backup_file:
        print(f"Backup:             {stats.backup_file}")
    print(f"Runtime:            {stats.elapsed_time or 'N/A'}")
    print("=" * 60 + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    try:
        config = parse_arguments(argv)
    except ConfigError as e:
        setup_logging()
        logger.error(f"error: {e}")
        return 1

    setup_logging(config.verbose, config.quiet, config.log_file)

    if not config.quiet:
        print("\n" + "=" * 60)
        print(" " * 15 + f"HOST LIST AGGREGATOR v{VERSION}")
        print("=" * 60 + "\n")

    events = LoggingEvents() if config.quiet or config.verbose else ProgressEvents()

    try:
        stats = run(config, events=events)
        if not config.quiet:
            print_summary(stats)
        return 0

    except KeyboardInterrupt:
        logger.info("\nOperation cancelled by user.")
        return 1
    except AggregatorError as e:
        logger.error(f"error: {e}")
        return 1
    except Exception as e:
        logger.error(f"An error occurred: {e}")
        if config.verbose:
            logger.exception("Traceback:")
        return 1


if __name__ == "__main__":
    sys.exit(main())
