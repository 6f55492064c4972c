"""
Legt eine Demo-Gilde mit Offizier, Mitgliedern, Wishlists und einer offenen
Loot-Session an und gibt Test-Tokens aus.
Ausführen: cd backend && python -m scripts.seed_demo_guild
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import SessionLocal, engine, Base
from app.auth.jwt import create_access_token
from app.models.guild import Guild, LootSystem
from app.models.user import User, UserRole
from app.models.wishlist import WishlistEntry, GearSlot
from app.models.loot import LootSession, LootCategory

GUILD_NAME = "Demo-Gilde"

# (Benutzername, Rolle, Teilnahmepunkte, Loot-Zähler)
MEMBERS = [
    ("anführer", UserRole.ADMIN, 12, 3),
    ("offizier", UserRole.OFFICER, 9, 2),
    ("aria", UserRole.MEMBER, 7, 0),
    ("bren", UserRole.MEMBER, 4, 1),
    ("cato", UserRole.MEMBER, 0, 0),
]

# (Benutzername, Slot, Item, Priorität)
WISHLIST = [
    ("aria", GearSlot.MAIN_HAND, "Tevent's Despair Blade", 1),
    ("bren", GearSlot.MAIN_HAND, "Tevent's Despair Blade", 1),
    ("cato", GearSlot.MAIN_HAND, "Tevent's Despair Blade", 1),
    ("offizier", GearSlot.MAIN_HAND, "Tevent's Despair Blade", 2),
    ("aria", GearSlot.HEAD, "Grim Reaper's Hood", 1),
    ("bren", GearSlot.CLOAK, "Grim Reaper's Cloak", 1),
]


def seed_demo_guild():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        guild = db.query(Guild).filter(Guild.name == GUILD_NAME).first()
        if guild:
            print(f"{GUILD_NAME} existiert bereits (ID {guild.id}), nichts zu tun.")
            return

        guild = Guild(name=GUILD_NAME, loot_system=LootSystem.COUNCIL, participation_threshold=1)
        db.add(guild)
        db.flush()

        users = {}
        for username, role, points, loot_count in MEMBERS:
            user = User(
                username=username,
                role=role,
                guild_id=guild.id,
                participation_points=points,
                loot_received_count=loot_count,
            )
            db.add(user)
            users[username] = user
        db.flush()
        print(f"+ {len(users)} Mitglieder angelegt")

        for username, slot, item_name, priority in WISHLIST:
            db.add(WishlistEntry(
                user_id=users[username].id,
                slot_name=slot,
                item_name=item_name,
                item_priority=priority,
            ))
        print(f"+ {len(WISHLIST)} Wishlist-Einträge angelegt")

        officer = users["offizier"]
        db.add(LootSession(
            guild_id=guild.id,
            item_name="Tevent's Despair Blade",
            category=LootCategory.GUILD_RAID,
            is_active=True,
            created_by_id=officer.id,
        ))
        db.add(LootSession(
            guild_id=guild.id,
            item_name="Grim Reaper's Cloak",
            category=LootCategory.GUILD_RAID,
            is_active=False,
            created_by_id=officer.id,
        ))
        db.commit()
        print("\n✓ Demo-Gilde erstellt!")

        print("\nTest-Tokens (Authorization: Bearer <token>):")
        for username, user in users.items():
            print(f"  {username:10s} {create_access_token({'sub': str(user.id)})}")

    except Exception as e:
        print(f"Fehler: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_demo_guild()
