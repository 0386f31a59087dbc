"""Grant or revoke clinic access for an account (users/{email}).

    python set_authorized.py someone@example.com
    python set_authorized.py someone@example.com --revoke
    python set_authorized.py someone@example.com --acupuncture --tuina
"""
import argparse

from clinic.core.config import settings
from clinic.core.firebase import init_firebase


def set_authorized(store, email: str, authorized: bool = True, **flags):
    ref = store.user_ref(email)
    update = {"authorized": authorized}
    update.update({k: v for k, v in flags.items() if v is not None})
    ref.set(update, merge=True)
    return ref.get().to_dict()


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("email")
    parser.add_argument("--revoke", action="store_true")
    parser.add_argument("--acupuncture", action="store_true", default=None)
    parser.add_argument("--tuina", action="store_true", default=None)
    parser.add_argument("--pro", action="store_true", default=None)
    args = parser.parse_args(argv)

    store = init_firebase(settings)
    if not store.available:
        raise SystemExit(f"Firebase credentials not found at: {settings.FIREBASE_CREDENTIALS}")

    record = set_authorized(
        store,
        args.email,
        authorized=not args.revoke,
        acupuncture=args.acupuncture,
        tuina=args.tuina,
        pro=args.pro,
    )
    print(f"✅ {args.email}: {record}")
    print("✅ The user must sign out and sign in again for the change to apply")


if __name__ == "__main__":
    main()
