"""Unit tests for packaged filename generation."""

from skill_seekers.packaging.filenames import positional_name, slugify_title, unique_filename


class TestSlugifyTitle:
    """Test cases for slugify_title function."""

    def test_spaces_to_underscores(self) -> None:
        """Test that words are joined with underscores and lower-cased."""
        assert slugify_title("Install the CLI") == "install_the_cli"

    def test_unicode_normalization(self) -> None:
        """Test that accented characters are folded to ASCII."""
        assert slugify_title("Château Setup!") == "chateau_setup"
        assert slugify_title("Señor Naïve") == "senor_naive"

    def test_length_limit(self) -> None:
        """Test that stems are cut to twenty characters."""
        assert slugify_title("Configure the advanced options") == "configure_the_advanc"

    def test_trailing_separator_stripped_after_cut(self) -> None:
        """Test that a cut landing on a separator leaves no underscore."""
        assert slugify_title("Install the package manager") == "install_the_package"

    def test_empty_results(self) -> None:
        """Test that titles without usable characters give an empty stem."""
        assert slugify_title(None) == ""
        assert slugify_title("") == ""
        assert slugify_title("!!!") == ""


class TestPositionalAndUniqueNames:
    """Test cases for fallback and collision handling."""

    def test_positional_name(self) -> None:
        """Test that the first block has no numeric suffix."""
        assert positional_name("helper", 0) == "helper"
        assert positional_name("helper", 1) == "helper_2"
        assert positional_name("template", 4) == "template_5"

    def test_unique_filename(self) -> None:
        """Test that collisions get increasing suffixes."""
        used: set[str] = set()

        assert unique_filename("setup", ".py", used) == "setup.py"
        assert unique_filename("setup", ".py", used) == "setup_1.py"
        assert unique_filename("setup", ".py", used) == "setup_2.py"
        assert unique_filename("setup", ".sh", used) == "setup.sh"
        assert used == {"setup.py", "setup_1.py", "setup_2.py", "setup.sh"}
