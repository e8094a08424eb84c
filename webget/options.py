"""Declarative table of the command-line options understood by webget."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class OptionKind(Enum):
    """How an option is applied once the scanner has recognized it."""

    VALUE = "value"
    BOOLEAN = "boolean"
    # Special actions, handled directly by the dispatcher.
    APPEND_OUTPUT = "append-output"
    CLOBBER = "clobber"
    EXECUTE = "execute"
    HELP = "help"
    NO = "no"
    PARENT = "parent"
    VERSION = "version"


class ArgRequirement(Enum):
    """Whether an option takes an argument."""

    NONE = 0
    REQUIRED = 1
    OPTIONAL = 2


@dataclass(frozen=True)
class OptionDescriptor:
    """One user-facing option.

    Standard options (``VALUE`` and ``BOOLEAN``) name the configuration
    command they feed; special actions name their argument requirement
    instead.
    """

    long_name: Optional[str]
    short_name: Optional[str]
    kind: OptionKind
    command: Optional[str] = None
    argtype: Optional[ArgRequirement] = None

    def __post_init__(self):
        standard = self.kind in (OptionKind.VALUE, OptionKind.BOOLEAN)
        if standard and (self.command is None or self.argtype is not None):
            raise ValueError(f"--{self.long_name} needs a command and no argtype")
        if not standard and (self.command is not None or self.argtype is None):
            raise ValueError(f"--{self.long_name} needs an argtype and no command")
        if self.short_name is not None and len(self.short_name) != 1:
            raise ValueError(f"Invalid short name for --{self.long_name}: {self.short_name!r}")

    @property
    def is_standard(self) -> bool:
        return self.kind in (OptionKind.VALUE, OptionKind.BOOLEAN)


def _value(long_name: str, short_name: Optional[str], command: str) -> OptionDescriptor:
    return OptionDescriptor(long_name, short_name, OptionKind.VALUE, command)


def _boolean(long_name: str, short_name: Optional[str], command: str) -> OptionDescriptor:
    return OptionDescriptor(long_name, short_name, OptionKind.BOOLEAN, command)


def _special(long_name: str, short_name: Optional[str], kind: OptionKind,
             argtype: ArgRequirement) -> OptionDescriptor:
    return OptionDescriptor(long_name, short_name, kind, argtype=argtype)


# Order matters: descriptor indices are the identities handed out by the
# compiler, and help output follows the same ordering conventions.
OPTION_DATA: Tuple[OptionDescriptor, ...] = (
    _value("accept", "A", "accept"),
    _special("append-output", "a", OptionKind.APPEND_OUTPUT, ArgRequirement.REQUIRED),
    _boolean("background", "b", "background"),
    _boolean("backup-converted", "K", "backupconverted"),
    _value("backups", None, "backups"),
    _value("base", "B", "base"),
    _value("bind-address", None, "bindaddress"),
    _boolean("cache", "C", "cache"),
    _special("clobber", None, OptionKind.CLOBBER, ArgRequirement.OPTIONAL),
    _value("connect-timeout", None, "connecttimeout"),
    _boolean("continue", "c", "continue"),
    _boolean("convert-links", "k", "convertlinks"),
    _boolean("cookies", None, "cookies"),
    _value("cut-dirs", None, "cutdirs"),
    _boolean("debug", "d", "debug"),
    _boolean("delete-after", None, "deleteafter"),
    _boolean("directories", None, "dirstruct"),
    _value("directory-prefix", "P", "dirprefix"),
    _boolean("dns-cache", None, "dnscache"),
    _value("dns-timeout", None, "dnstimeout"),
    _value("domains", "D", "domains"),
    _value("dot-style", None, "dotstyle"),
    _value("exclude-directories", "X", "excludedirectories"),
    _value("exclude-domains", None, "excludedomains"),
    _special("execute", "e", OptionKind.EXECUTE, ArgRequirement.REQUIRED),
    _boolean("follow-ftp", None, "followftp"),
    _value("follow-tags", None, "followtags"),
    _boolean("force-directories", "x", "dirstruct"),
    _boolean("force-html", "F", "forcehtml"),
    _boolean("glob", "g", "glob"),
    _value("header", None, "header"),
    _special("help", "h", OptionKind.HELP, ArgRequirement.NONE),
    _boolean("host-directories", None, "addhostdir"),
    _boolean("html-extension", "E", "htmlextension"),
    _boolean("htmlify", None, "htmlify"),
    _boolean("http-keep-alive", None, "httpkeepalive"),
    _value("http-passwd", None, "httppasswd"),
    _value("http-user", None, "httpuser"),
    _boolean("ignore-length", None, "ignorelength"),
    _value("ignore-tags", "G", "ignoretags"),
    _value("include-directories", "I", "includedirectories"),
    _value("input-file", "i", "input"),
    _boolean("keep-session-cookies", None, "keepsessioncookies"),
    _value("level", "l", "reclevel"),
    _value("limit-rate", None, "limitrate"),
    _value("load-cookies", None, "loadcookies"),
    _boolean("mirror", "m", "mirror"),
    _special("no", "n", OptionKind.NO, ArgRequirement.REQUIRED),
    _boolean("no-clobber", None, "noclobber"),
    _boolean("no-parent", None, "noparent"),
    _value("output-document", "O", "outputdocument"),
    _value("output-file", "o", "logfile"),
    _boolean("page-requisites", "p", "pagerequisites"),
    _special("parent", None, OptionKind.PARENT, ArgRequirement.OPTIONAL),
    _boolean("passive-ftp", None, "passiveftp"),
    _value("post-data", None, "postdata"),
    _value("post-file", None, "postfile"),
    _value("progress", None, "progress"),
    _boolean("proxy", "Y", "useproxy"),
    _value("proxy-passwd", None, "proxypasswd"),
    _value("proxy-user", None, "proxyuser"),
    _boolean("quiet", "q", "quiet"),
    _value("quota", "Q", "quota"),
    _boolean("random-wait", None, "randomwait"),
    _value("read-timeout", None, "readtimeout"),
    _boolean("recursive", "r", "recursive"),
    _value("referer", None, "referer"),
    _value("reject", "R", "reject"),
    _boolean("relative", "L", "relativeonly"),
    _boolean("remove-listing", None, "removelisting"),
    _value("restrict-file-names", None, "restrictfilenames"),
    _boolean("retr-symlinks", None, "retrsymlinks"),
    _boolean("retry-connrefused", None, "retryconnrefused"),
    _value("save-cookies", None, "savecookies"),
    _boolean("save-headers", "s", "saveheaders"),
    _boolean("server-response", "S", "serverresponse"),
    _boolean("span-hosts", "H", "spanhosts"),
    _boolean("spider", None, "spider"),
    _value("sslcadir", None, "sslcadir"),
    _value("sslcafile", None, "sslcafile"),
    _value("sslcertfile", None, "sslcertfile"),
    _value("sslcertkey", None, "sslcertkey"),
    _boolean("sslcheckcert", None, "sslcheckcert"),
    _boolean("strict-comments", None, "strictcomments"),
    _value("timeout", "T", "timeout"),
    _boolean("timestamping", "N", "timestamping"),
    _value("tries", "t", "tries"),
    _boolean("use-proxy", None, "useproxy"),
    _value("user-agent", "U", "useragent"),
    _boolean("verbose", "v", "verbose"),
    _special("version", "V", OptionKind.VERSION, ArgRequirement.NONE),
    _value("wait", "w", "wait"),
    _value("waitretry", None, "waitretry"),
)
