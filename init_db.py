from app import create_app, db
from app.models import EmailSettings

def init_db():
    app = create_app()
    with app.app_context():
        db.create_all()

        # Add an empty settings row so the reminder job reports "not configured"
        # until SMTP credentials are saved with `flask reminders configure`
        if db.session.execute(db.select(EmailSettings).limit(1)).scalar_one_or_none() is None:
            db.session.add(EmailSettings())

        db.session.commit()

if __name__ == '__main__':
    init_db()
