"""Constants for the metasearch layer."""

CATEGORY_LIST = (
    "general",
    "news",
    "videos",
    "images",
    "science",
    "it",
    "files",
    "social+media",
)
RECENCY_ALLOWED_LIST = ("day", "week", "month", "year")

DEFAULT_CATEGORY = "general"
DEFAULT_LANGUAGE = "en-US"
DEFAULT_RETRY_BUDGET = 6
DEFAULT_REQUEST_TIMEOUT = 10.0

FAVICON_SERVICE_URL = "https://www.google.com/s2/favicons"

PUBLIC_INSTANCES = (
    "baresearch.org",
    "copp.gg",
    "darmarit.org",
    "etsi.me",
    "fairsuch.net",
    "nogoo.me",
    "northboot.xyz",
    "nyc1.sx.ggtyler.dev",
    "ooglester.com",
    "opnxng.com",
    "paulgo.io",
    "priv.au",
    "s.trung.fun",
    "search.blitzw.in",
    "search.charliewhiskey.net",
    "search.citw.lgbt",
    "search.darkness.services",
    "search.datura.network",
    "search.dotone.nl",
    "search.gcomm.ch",
    "search.hbubli.cc",
    "search.im-in.space",
    "search.incogniweb.net",
    "search.inetol.net",
    "search.leptons.xyz",
    "search.nadeko.net",
    "search.ngn.tf",
    "search.ononoki.org",
    "search.privacyredirect.com",
    "search.sapti.me",
    "search.rowie.at",
    "search.projectsegfau.lt",
    "search.tommy-tran.com",
    "searx.aleteoryx.me",
    "searx.ankha.ac",
    "searx.be",
    "searx.colbster937.dev",
    "searx.daetalytica.io",
    "searx.dresden.network",
    "searx.foss.family",
    "searx.hu",
    "searx.juancord.xyz",
    "searx.lunar.icu",
    "searx.mxchange.org",
    "searx.namejeff.xyz",
    "searx.oakleycord.dev",
    "searx.ro",
    "searx.sev.monster",
    "searx.thefloatinglab.world",
    "searx.tiekoetter.com",
    "searx.tuxcloud.net",
    "searx.work",
    "searx.zhenyapav.com",
    "searxng.hweeren.com",
    "searxng.online",
    "searxng.shreven.org",
    "searxng.site",
    "skyrimhater.com",
    "sx.ca.zorby.top",
    "sx.catgirl.cloud",
    "sx.thatxtreme.dev",
    "sx.zorby.top",
    "xo.wtf",
)

__all__ = [
    "CATEGORY_LIST",
    "RECENCY_ALLOWED_LIST",
    "DEFAULT_CATEGORY",
    "DEFAULT_LANGUAGE",
    "DEFAULT_RETRY_BUDGET",
    "DEFAULT_REQUEST_TIMEOUT",
    "FAVICON_SERVICE_URL",
    "PUBLIC_INSTANCES",
]
