"""Unit tests for timezone resolution."""
import pytest

from processor.errors import ConfigurationError
from processor.timezone_resolver import load_timezone, resolve_timezone


class TestResolveTimezone:
    """Test cases for resolve_timezone."""
    
    def test_viewer_default_without_settings(self):
        """Test that the viewer timezone is used when nothing overrides it."""
        assert resolve_timezone('Europe/Paris').key == 'Europe/Paris'
    
    def test_empty_override_keeps_viewer_default(self):
        """Test that an empty override does not replace the viewer timezone."""
        timezone = resolve_timezone('Europe/Paris', {'timezone_override': ''})
        
        assert timezone.key == 'Europe/Paris'
    
    def test_override_wins(self):
        """Test that a configured override replaces the viewer timezone."""
        timezone = resolve_timezone('UTC', {'timezone_override': 'America/New_York'})
        
        assert timezone.key == 'America/New_York'
    
    def test_invalid_override_is_configuration_error(self):
        """Test that an unknown override identifier fails the render."""
        with pytest.raises(ConfigurationError):
            resolve_timezone('UTC', {'timezone_override': 'Mars/Olympus_Mons'})
    
    def test_invalid_viewer_timezone_is_configuration_error(self):
        """Test that an unknown viewer timezone fails the render."""
        with pytest.raises(ConfigurationError):
            resolve_timezone('Not/AZone')
    
    def test_empty_identifier_rejected(self):
        with pytest.raises(ConfigurationError):
            load_timezone('')
    
    @pytest.mark.parametrize('name', ['America', 'Europe'])
    def test_zone_directory_is_configuration_error(self, name):
        """Test that a tzdata region directory is rejected as an identifier."""
        with pytest.raises(ConfigurationError):
            resolve_timezone(name)
        with pytest.raises(ConfigurationError):
            resolve_timezone('UTC', {'timezone_override': name})
