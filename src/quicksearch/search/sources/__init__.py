from quicksearch.search.sources.app_shortcuts import AppShortcutProvider, AppShortcutsSource
from quicksearch.search.sources.apps import AppsSource
from quicksearch.search.sources.contacts import ContactProvider, ContactsSource
from quicksearch.search.sources.files import FileProvider, FilesSource, classify_mime
from quicksearch.search.sources.memory import InMemoryProvider
from quicksearch.search.sources.settings import SettingsProvider, SettingsSource

__all__ = [
    "AppShortcutProvider",
    "AppShortcutsSource",
    "AppsSource",
    "ContactProvider",
    "ContactsSource",
    "FileProvider",
    "FilesSource",
    "InMemoryProvider",
    "SettingsProvider",
    "SettingsSource",
    "classify_mime",
]
