from pydantic import BaseModel, EmailStr, Field

class SignInIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class AccessTokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"

class ForgotPasswordIn(BaseModel):
    email: EmailStr

class ResetPasswordIn(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=128)

class MessageOut(BaseModel):
    message: str

class LinkIssuedOut(BaseModel):
    message: str
    sent: bool = True
    # only outside prod, so flows can be driven without a mailbox
    token: str | None = None
