"""Well-known cache directories on macOS and Linux.

Patterns use ``{home}`` for the home directory and ``{cache}`` for the
user cache root (``$XDG_CACHE_HOME`` or ``~/.cache``). A component
containing ``*`` is matched against the entries of its parent directory.

Agent tools keep credentials next to their caches, so their entries only
name cache subdirectories.
"""

from reclaim.models.cache import CacheSource, KnownCache

_BROWSER = CacheSource.BROWSER
_DEVELOPER = CacheSource.DEVELOPER
_AI_AGENT = CacheSource.AI_AGENT

# Roots whose top-level directories are reported one by one.
SYSTEM_CACHE_ROOTS: tuple[str, ...] = ("/Library/Caches", "/var/cache")
APPLICATION_CACHE_ROOTS: tuple[str, ...] = ("{home}/Library/Caches", "{cache}")

BROWSER_CACHES: tuple[KnownCache, ...] = (
    KnownCache("Safari", _BROWSER, ("{home}/Library/Caches/com.apple.Safari",)),
    KnownCache(
        "Chrome", _BROWSER, ("{home}/Library/Caches/Google/Chrome", "{cache}/google-chrome")
    ),
    KnownCache("Chromium", _BROWSER, ("{home}/Library/Caches/Chromium", "{cache}/chromium")),
    KnownCache("Firefox", _BROWSER, ("{home}/Library/Caches/Firefox", "{cache}/mozilla/firefox")),
    KnownCache(
        "Edge", _BROWSER, ("{home}/Library/Caches/Microsoft Edge", "{cache}/microsoft-edge")
    ),
    KnownCache(
        "Brave", _BROWSER, ("{home}/Library/Caches/BraveSoftware", "{cache}/BraveSoftware")
    ),
)

DEVELOPER_CACHES: tuple[KnownCache, ...] = (
    KnownCache("Xcode", _DEVELOPER, ("{home}/Library/Caches/com.apple.dt.Xcode",)),
    KnownCache("Xcode DerivedData", _DEVELOPER, ("{home}/Library/Developer/Xcode/DerivedData",)),
    KnownCache(
        "Xcode Archives",
        _DEVELOPER,
        ("{home}/Library/Developer/Xcode/Archives",),
        regenerable=False,
    ),
    KnownCache(
        "iOS Device Support", _DEVELOPER, ("{home}/Library/Developer/Xcode/iOS DeviceSupport",)
    ),
    KnownCache(
        "Xcode Simulators", _DEVELOPER, ("{home}/Library/Developer/CoreSimulator/Caches",)
    ),
    KnownCache(
        "Android Studio",
        _DEVELOPER,
        (
            "{home}/Library/Caches/Google/AndroidStudio*",
            "{home}/Library/Application Support/Google/AndroidStudio*/caches",
            "{cache}/Google/AndroidStudio*",
        ),
    ),
    KnownCache(
        "IntelliJ IDEA",
        _DEVELOPER,
        (
            "{home}/Library/Caches/JetBrains/IntelliJIdea*",
            "{home}/Library/Application Support/JetBrains/IntelliJIdea*/caches",
            "{cache}/JetBrains/IntelliJIdea*",
        ),
    ),
    KnownCache(
        "JetBrains Toolbox",
        _DEVELOPER,
        ("{home}/Library/Caches/JetBrains/Toolbox", "{cache}/JetBrains/Toolbox"),
    ),
    KnownCache(
        "VS Code",
        _DEVELOPER,
        (
            "{home}/Library/Caches/com.microsoft.VSCode",
            "{home}/Library/Application Support/Code/CachedData",
            "{home}/.config/Code/CachedData",
            "{home}/.config/Code/Cache",
        ),
    ),
    KnownCache("CocoaPods", _DEVELOPER, ("{home}/Library/Caches/CocoaPods",)),
    KnownCache("Carthage", _DEVELOPER, ("{home}/Library/Caches/org.carthage.CarthageKit",)),
    KnownCache(
        "Swift Package Manager",
        _DEVELOPER,
        ("{home}/Library/Caches/org.swift.swiftpm", "{cache}/org.swift.swiftpm"),
    ),
    KnownCache("Gradle", _DEVELOPER, ("{home}/.gradle/caches",)),
    KnownCache("Maven", _DEVELOPER, ("{home}/.m2/repository",)),
    KnownCache("npm", _DEVELOPER, ("{home}/.npm",)),
    KnownCache("Yarn", _DEVELOPER, ("{home}/Library/Caches/Yarn", "{cache}/yarn")),
    KnownCache("pip", _DEVELOPER, ("{home}/Library/Caches/pip", "{cache}/pip")),
    KnownCache("Homebrew", _DEVELOPER, ("{home}/Library/Caches/Homebrew", "{cache}/Homebrew")),
)

AI_AGENT_CACHES: tuple[KnownCache, ...] = (
    KnownCache(
        "Cursor",
        _AI_AGENT,
        (
            "{home}/Library/Application Support/Cursor/Cache",
            "{home}/Library/Application Support/Cursor/CachedData",
            "{home}/Library/Caches/com.todesktop.230313mzl4w4u92",
            "{home}/.config/Cursor/Cache",
            "{home}/.config/Cursor/CachedData",
        ),
    ),
    KnownCache(
        "GitHub Copilot",
        _AI_AGENT,
        (
            "{home}/Library/Application Support/GitHub Copilot/*[Cc]ache*",
            "{home}/.config/github-copilot/*[Cc]ache*",
        ),
    ),
    KnownCache(
        "Codeium",
        _AI_AGENT,
        ("{home}/Library/Application Support/Codeium/*[Cc]ache*", "{home}/.codeium/*[Cc]ache*"),
    ),
    KnownCache(
        "Tabnine",
        _AI_AGENT,
        ("{home}/Library/Application Support/TabNine/*[Cc]ache*", "{home}/.tabnine/*[Cc]ache*"),
    ),
    KnownCache(
        "Kiro", _AI_AGENT, ("{home}/.kiro/cache", "{home}/Library/Caches/Kiro", "{cache}/kiro")
    ),
    KnownCache("Continue.dev", _AI_AGENT, ("{home}/.continue/index",)),
    KnownCache("Aider", _AI_AGENT, ("{home}/.aider/caches",)),
    KnownCache("OpenAI CLI", _AI_AGENT, ("{home}/.openai/*[Cc]ache*",)),
)

KNOWN_CACHES: tuple[KnownCache, ...] = (*BROWSER_CACHES, *DEVELOPER_CACHES, *AI_AGENT_CACHES)


def path_markers(known: tuple[KnownCache, ...]) -> tuple[str, ...]:
    """Lowercase path fragments identifying files inside the given caches.

    ``{home}`` is dropped and ``{cache}`` becomes ``/.cache`` so the
    fragments match any home directory. Wildcard patterns and
    non-regenerable entries are skipped.
    """
    markers: list[str] = []
    for entry in known:
        if not entry.regenerable:
            continue
        for pattern in entry.patterns:
            if "*" in pattern:
                continue
            fragment = pattern.replace("{home}", "").replace("{cache}", "/.cache")
            markers.append(fragment.lower() + "/")
    return tuple(markers)
