from sqlalchemy.orm import Session
from models.session import Session as SessionModel


def get_session_by_token(db: Session, token: str):
    return db.query(SessionModel).filter(SessionModel.token == token).first()
