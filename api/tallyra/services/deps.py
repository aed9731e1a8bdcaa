from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from tallyra.core.enums import Role
from tallyra.core.security import decode_access_token
from tallyra.db.session import get_db
from tallyra.db.store import SqlTransactionStore
from tallyra.schemas.session import OperatorSession

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def get_store(db: Session = Depends(get_db)) -> SqlTransactionStore:
    return SqlTransactionStore(db)


def get_current_session(
    token: str = Depends(oauth2_scheme),
    store: SqlTransactionStore = Depends(get_store),
) -> OperatorSession:
    try:
        payload = decode_access_token(token)
        operator_id = payload.get("sub")
        shop_id = payload.get("shop_id")
        role = Role(payload.get("role"))
        if not operator_id or not shop_id:
            raise ValueError("Missing subject")
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication token")

    shop = store.get_shop(shop_id)
    if not shop:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown shop")

    return OperatorSession(
        shop=shop,
        role=role,
        staff_id=operator_id if role == Role.STAFF else None,
    )
