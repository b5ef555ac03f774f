from app.core.outcomes import Outcome
from app.core.viewer import Viewer
from app.models.user_profile import UserProfile
from app.services.user_directory import user_directory


class TestUserDirectory:
    """Tests para el directorio de perfiles."""

    def test_ensure_profile_is_idempotent(self, db):
        viewer = Viewer.from_display_name("Frank Ocean")

        assert user_directory.ensure_profile(db, viewer) is True
        assert user_directory.ensure_profile(db, viewer) is False
        assert db.query(UserProfile).count() == 1

    def test_new_profile_gets_generated_avatar(self, db):
        viewer = Viewer.from_display_name("Frank Ocean")
        user_directory.ensure_profile(db, viewer)

        profile = user_directory.get_profile(db, viewer.user_id)

        assert profile.handle == "frank_ocean"
        assert "Frank%20Ocean" in profile.avatar_url

    def test_touch_updates_avatar(self, db, alice):
        user_directory.touch(db, Viewer(alice.user_id, alice.display_name, "https://img/new.png"))

        db.expire_all()
        assert user_directory.get_profile(db, alice.user_id).avatar_url == "https://img/new.png"

    def test_update_bio(self, db, alice):
        result = user_directory.update_bio(db, alice.user_id, "  Me gustan las zapatillas  ")

        assert result.ok
        assert result.value.bio == "Me gustan las zapatillas"

    def test_update_bio_caps_length_and_clears_blank(self, db, alice):
        assert len(user_directory.update_bio(db, alice.user_id, "x" * 300).value.bio) == 200
        assert user_directory.update_bio(db, alice.user_id, "   ").value.bio is None

    def test_update_bio_unknown_user(self, db):
        assert user_directory.update_bio(db, "user_nadie", "hola").outcome == Outcome.NOT_FOUND
