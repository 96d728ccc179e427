from __future__ import annotations

from enum import Enum

from rich.style import Style

from .errors import UnknownTagError


class TagClass(Enum):
    """Display classes tags are coloured by."""

    MEDIA = "media"
    SITE_META_RED = "site-meta-red"
    SITE_META_MAGENTA = "site-meta-magenta"
    OTHER = "other"


# 256-colour palette entries
TAG_CLASS_COLORS = {
    TagClass.MEDIA: 117,
    TagClass.SITE_META_RED: 210,
    TagClass.SITE_META_MAGENTA: 102,
    TagClass.OTHER: 222,
}


class Tag(Enum):
    # compsci
    AI = "ai"
    COMPSCI = "compsci"
    DISTRIBUTED = "distributed"
    FORMALMETHODS = "formalmethods"
    GRAPHICS = "graphics"
    NETWORKING = "networking"
    OSDEV = "osdev"
    PLT = "plt"
    PROGRAMMING = "programming"

    # culture
    CULTURE = "culture"
    LAW = "law"
    PERSON = "person"
    PHILOSOPHY = "philosophy"

    # field
    COGSCI = "cogsci"
    CRYPTOGRAPHY = "cryptography"
    EDUCATION = "education"
    FINANCE = "finance"
    HARDWARE = "hardware"
    MATH = "math"
    SCIENCE = "science"

    # format
    ASK = "ask"
    AUDIO = "audio"
    BOOK = "book"
    PDF = "pdf"
    SHOW = "show"
    SLIDES = "slides"
    TRANSCRIPT = "transcript"
    VIDEO = "video"

    # genre
    ART = "art"
    EVENT = "event"
    HISTORICAL = "historical"
    JOB = "job"
    NEWS = "news"
    RANT = "rant"
    RELEASE = "release"
    SATIRE = "satire"

    # interaction
    INTERACTION = "interaction"
    A11Y = "a11y"
    DESIGN = "design"
    VISUALIZATION = "visualization"

    # languages
    APL = "apl"
    ASSEMBLY = "assembly"
    C = "c"
    CPP = "c++"
    CLOJURE = "clojure"
    CSS = "css"
    D = "d"
    DOTNET = "dotnet"
    ELIXIR = "elixir"
    ELM = "elm"
    ERLANG = "erlang"
    FORTRAN = "fortran"
    GO = "go"
    HASKELL = "haskell"
    JAVA = "java"
    JAVASCRIPT = "javascript"
    KOTLIN = "kotlin"
    LISP = "lisp"
    LUA = "lua"
    ML = "ml"
    NODEJS = "nodejs"
    OBJECTIVEC = "objectivec"
    PERL = "perl"
    PHP = "php"
    PYTHON = "python"
    RUBY = "ruby"
    RUST = "rust"
    SCALA = "scala"
    SWIFT = "swift"
    ZIG = "zig"

    # site
    ANNOUNCE = "announce"
    INTERVIEW = "interview"
    META = "meta"

    # os
    ANDROID = "android"
    DRAGONFLYBSD = "dragonflybsd"
    FREEBSD = "freebsd"
    ILLUMOS = "illumos"
    IOS = "ios"
    LINUX = "linux"
    MAC = "mac"
    NETBSD = "netbsd"
    NIX = "nix"
    OPENBSD = "openbsd"
    UNIX = "unix"
    WINDOWS = "windows"

    # platforms
    BROWSERS = "browsers"
    EMAIL = "email"
    GAMES = "games"
    IPV6 = "ipv6"
    MERKLETREES = "merkletrees"
    MOBILE = "mobile"
    WASM = "wasm"
    WEB = "web"

    # practices
    API = "api"
    DEBUGGING = "debugging"
    DEVOPS = "devops"
    PERFORMANCE = "performance"
    PRACTICES = "practices"
    PRIVACY = "privacy"
    REVERSING = "reversing"
    SCALING = "scaling"
    SECURITY = "security"
    TESTING = "testing"
    VIRTUALIZATION = "virtualization"

    # tools
    COMPILERS = "compilers"
    DATABASES = "databases"
    EMACS = "emacs"
    SYSTEMD = "systemd"
    VCS = "vcs"
    VIM = "vim"

    @classmethod
    def from_code(cls, code: str) -> Tag:
        """Look up a tag by the code the site uses, e.g. ``"c++"``."""
        try:
            return cls(code)
        except ValueError:
            raise UnknownTagError(code) from None

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_class(self) -> TagClass:
        if self in _MEDIA_TAGS:
            return TagClass.MEDIA
        if self in _SITE_TAGS:
            return TagClass.SITE_META_RED
        if self is Tag.META:
            return TagClass.SITE_META_MAGENTA
        return TagClass.OTHER

    def styled(self) -> str:
        """Return the tag code wrapped in the colour of its display class."""
        color = TAG_CLASS_COLORS[self.display_class]
        return Style(color=f"color({color})").render(self.code)

    def __str__(self) -> str:
        return self.code


_MEDIA_TAGS = frozenset(
    {Tag.AUDIO, Tag.BOOK, Tag.PDF, Tag.SLIDES, Tag.TRANSCRIPT, Tag.VIDEO}
)
_SITE_TAGS = frozenset({Tag.ASK, Tag.SHOW, Tag.ANNOUNCE, Tag.INTERVIEW})
