from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from apps.cars.models import Dealer

from .models import UserRole

User = get_user_model()

# Admins are created through the Django admin or seed_data, never by sign-up
SELF_SERVICE_ROLES = [UserRole.CUSTOMER.value, UserRole.DEALER.value]


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'display_name', 'role']
        read_only_fields = fields


class RegisterSerializer(serializers.ModelSerializer):
    """
    Sign-up for customers and dealers. Dealers also name their dealership,
    which is created together with the account.
    """

    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    role = serializers.ChoiceField(choices=SELF_SERVICE_ROLES, default=UserRole.CUSTOMER.value)
    business_name = serializers.CharField(write_only=True, required=False, max_length=160)
    city = serializers.CharField(write_only=True, required=False, max_length=80)
    phone = serializers.CharField(write_only=True, required=False, allow_blank=True, max_length=20)

    class Meta:
        model = User
        fields = [
            'username', 'email', 'password', 'first_name', 'last_name', 'role',
            'business_name', 'city', 'phone',
        ]
        extra_kwargs = {'email': {'required': True, 'allow_blank': False}}

    def validate_email(self, value: str) -> str:
        email = value.lower()
        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError('This email is already registered.')
        return email

    def validate(self, attrs):
        if attrs.get('role') == UserRole.DEALER:
            missing = {
                field: 'This field is required for dealer accounts.'
                for field in ('business_name', 'city') if not attrs.get(field)
            }
            if missing:
                raise serializers.ValidationError(missing)

        candidate = User(
            username=attrs.get('username', ''),
            email=attrs.get('email', ''),
            first_name=attrs.get('first_name', ''),
            last_name=attrs.get('last_name', ''),
        )
        try:
            validate_password(attrs['password'], candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({'password': list(exc.messages)})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        dealership = {field: validated_data.pop(field, '') for field in ('business_name', 'city', 'phone')}
        password = validated_data.pop('password')
        user = User.objects.create_user(password=password, **validated_data)
        if user.role == UserRole.DEALER:
            Dealer.objects.create(user=user, **dealership)
        return user


class RoleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Issue access/refresh tokens carrying the caller's role next to userId."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data


def issue_access_token(user) -> str:
    """Access token string for a user, as the login endpoint would issue it."""
    return str(RoleTokenObtainPairSerializer.get_token(user).access_token)
