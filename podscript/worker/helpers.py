from podscript.core.config import settings
from podscript.models import SpeakerId, VoiceProfile


def get_voice(speaker: SpeakerId) -> VoiceProfile:
    """
    Returns the voice profile mapped to each speaker.
    """
    voice_profiles: dict[int, VoiceProfile] = {
        1: VoiceProfile(settings.elevenlabs_voice1, stability=0.5, similarity_boost=0.5),  # Mark
        2: VoiceProfile(settings.elevenlabs_voice2, stability=0.45, similarity_boost=0.7),  # Brittney
    }
    return voice_profiles[speaker]
