"""
User-facing message catalogue.

Every message shown to the user goes through ``translate`` so the client can
speak English or Vietnamese (the shop's working language).
"""

from decimal import Decimal
from typing import Any, Dict, Union

DEFAULT_LOCALE = "en"

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        # Fetch failures
        "fetch_users_failed": "Failed to load users.",
        "fetch_debts_failed": "Failed to load debts.",
        "fetch_categories_failed": "Failed to load categories.",
        "fetch_products_failed": "Failed to load products.",
        "fetch_transactions_failed": "Failed to load transactions.",
        "fetch_history_failed": "Failed to load debt history.",
        "fetch_profile_failed": "Failed to load your profile.",
        # Transport
        "network_error": "Cannot reach the server. Please check your network connection.",
        "network_timeout": "The server did not answer in time. Please try again.",
        "server_error": "Server error: {status}",
        "invalid_response": "Invalid data received from the server.",
        "refresh_failed": "Saved, but the data could not be refreshed. Please reload.",
        # Authorization
        "login_required": "Please log in to continue.",
        "not_permitted": "You are not permitted to perform this action.",
        "login_fields_required": "Please enter your email and password.",
        "login_failed": "Login failed, please try again.",
        "register_failed": "Registration failed.",
        # Debt validation
        "amount_required": "Please enter a debt amount.",
        "amount_invalid": "Invalid debt amount.",
        "amount_negative": "Debt amount cannot be negative.",
        "date_required": "Please choose a date for the debt.",
        "user_required": "Please select a user.",
        "user_id_invalid": "Invalid user id.",
        "user_not_found": "User not found. Please reload the page.",
        "user_unknown": "User not found.",
        # Debt confirmations and results
        "confirm_set_debt": "Update the debt amount to {amount}?",
        "confirm_delete_debt": "Are you sure you want to delete this debt?",
        "confirm_mark_paid": "Mark this transaction as paid?",
        "confirm_add_entry": "Add a new debt of {amount} on {date}?",
        "add_debt_note": "Added debt: {amount}",
        "debt_updated": "Debt amount updated.",
        "debt_update_failed": "Failed to update the debt amount.",
        "debt_deleted": "Debt deleted.",
        "debt_delete_failed": "Failed to delete the debt.",
        "debt_entry_added": "New debt added.",
        "debt_entry_failed": "Failed to add the new debt.",
        "debt_details_updated": "Debt details updated.",
        "debt_details_failed": "Failed to update the debt details.",
        "marked_paid": "Transaction marked as paid.",
        "mark_paid_failed": "Failed to update the transaction.",
        # Cart and transactions
        "cart_empty": "The cart is empty.",
        "cart_user_required": "Please enter a username or log in.",
        "out_of_stock": "Cannot add: {name} is out of stock.",
        "stock_exceeded": "Cannot add: only {available} in stock.",
        "max_quantity": "The maximum quantity for {name} is {available}.",
        "quantity_invalid": "Invalid quantity.",
        "page_invalid": "Invalid page number.",
        "items_or_total_required": "Please add products or enter a valid total.",
        "transaction_created": "Transaction created.",
        "transaction_failed": "Failed to create the transaction.",
        "transactions_refreshed": "Transaction list refreshed.",
        # Catalog
        "price_min_negative": "The minimum price cannot be negative.",
        "price_max_negative": "The maximum price cannot be negative.",
        "price_range_invalid": "The minimum price cannot exceed the maximum price.",
        "product_fields_required": "Please fill in all product fields.",
        "product_added": "Product added.",
        "product_updated": "Product updated.",
        "product_deleted": "Product deleted.",
        "product_save_failed": "Failed to save the product.",
        "product_delete_failed": "Failed to delete the product.",
        "confirm_delete_product": "Are you sure you want to delete this product?",
        "category_name_required": "The category name cannot be empty.",
        "category_added": "Category added.",
        "category_deleted": "Category deleted.",
        "category_save_failed": "Failed to add the category.",
        "category_delete_failed": "Failed to delete the category.",
        "confirm_delete_category": "Are you sure you want to delete this category?",
        # Users
        "user_fields_required": "Please fill in all user fields.",
        "cannot_delete_self": "You cannot delete your own account.",
        "confirm_delete_user": "Are you sure you want to delete this user?",
        "user_added": "User added.",
        "user_deleted": "User deleted.",
        "user_save_failed": "Failed to add the user.",
        "user_delete_failed": "Failed to delete the user.",
        "request_failed": "The request failed.",
    },
    "vi": {
        "fetch_users_failed": "Lỗi khi lấy danh sách người dùng.",
        "fetch_debts_failed": "Lỗi khi lấy danh sách nợ.",
        "fetch_categories_failed": "Lỗi khi lấy danh mục.",
        "fetch_products_failed": "Lỗi khi lấy sản phẩm.",
        "fetch_transactions_failed": "Lỗi khi lấy danh sách giao dịch.",
        "fetch_history_failed": "Lỗi khi tải lịch sử nợ.",
        "fetch_profile_failed": "Lỗi khi lấy thông tin tài khoản.",
        "network_error": "Không thể kết nối đến server. Vui lòng kiểm tra kết nối mạng.",
        "network_timeout": "Server không phản hồi kịp thời. Vui lòng thử lại.",
        "server_error": "Lỗi từ server: {status}",
        "invalid_response": "Dữ liệu nhận từ server không hợp lệ.",
        "refresh_failed": "Đã cập nhật thành công nhưng không thể làm mới dữ liệu. Vui lòng tải lại trang.",
        "login_required": "Vui lòng đăng nhập để tiếp tục.",
        "not_permitted": "Bạn không có quyền thực hiện thao tác này.",
        "login_fields_required": "Vui lòng nhập đầy đủ email và mật khẩu.",
        "login_failed": "Đăng nhập thất bại, vui lòng thử lại.",
        "register_failed": "Đăng ký thất bại.",
        "amount_required": "Vui lòng nhập số tiền nợ.",
        "amount_invalid": "Số tiền nợ không hợp lệ.",
        "amount_negative": "Số tiền nợ không được âm.",
        "date_required": "Vui lòng chọn ngày tháng cho khoản nợ.",
        "user_required": "Vui lòng chọn người dùng.",
        "user_id_invalid": "ID người dùng không hợp lệ.",
        "user_not_found": "Không tìm thấy người dùng. Vui lòng tải lại trang.",
        "user_unknown": "Không tìm thấy người dùng.",
        "confirm_set_debt": "Xác nhận cập nhật số tiền nợ thành {amount} VNĐ?",
        "confirm_delete_debt": "Bạn có chắc muốn xóa khoản nợ này?",
        "confirm_mark_paid": "Xác nhận đánh dấu giao dịch này đã thanh toán?",
        "confirm_add_entry": "Xác nhận thêm khoản nợ mới: {amount} VNĐ vào ngày {date}?",
        "add_debt_note": "Thêm nợ mới: {amount} VNĐ",
        "debt_updated": "Cập nhật số tiền nợ thành công!",
        "debt_update_failed": "Lỗi khi cập nhật số tiền nợ.",
        "debt_deleted": "Xóa khoản nợ thành công.",
        "debt_delete_failed": "Lỗi khi xóa khoản nợ.",
        "debt_entry_added": "Thêm khoản nợ mới thành công!",
        "debt_entry_failed": "Lỗi khi thêm khoản nợ mới.",
        "debt_details_updated": "Cập nhật thông tin nợ thành công!",
        "debt_details_failed": "Lỗi khi cập nhật thông tin nợ.",
        "marked_paid": "Đánh dấu đã thanh toán thành công!",
        "mark_paid_failed": "Lỗi khi cập nhật giao dịch.",
        "cart_empty": "Giỏ hàng trống.",
        "cart_user_required": "Vui lòng nhập tên người dùng hoặc đăng nhập.",
        "out_of_stock": "Không thể thêm: Sản phẩm {name} đã hết hàng.",
        "stock_exceeded": "Không thể thêm: Số lượng trong kho ({available}) không đủ.",
        "max_quantity": "Số lượng tối đa cho {name} là {available}.",
        "quantity_invalid": "Số lượng không hợp lệ.",
        "page_invalid": "Số trang không hợp lệ.",
        "items_or_total_required": "Vui lòng thêm sản phẩm hoặc nhập tổng tiền hợp lệ.",
        "transaction_created": "Tạo giao dịch thành công!",
        "transaction_failed": "Lỗi khi tạo giao dịch.",
        "transactions_refreshed": "Danh sách giao dịch đã được làm mới!",
        "price_min_negative": "Giá tối thiểu không được âm.",
        "price_max_negative": "Giá tối đa không được âm.",
        "price_range_invalid": "Giá tối thiểu không được lớn hơn giá tối đa.",
        "product_fields_required": "Vui lòng điền đầy đủ thông tin sản phẩm.",
        "product_added": "Thêm sản phẩm thành công!",
        "product_updated": "Cập nhật sản phẩm thành công!",
        "product_deleted": "Xóa sản phẩm thành công!",
        "product_save_failed": "Lỗi khi lưu sản phẩm.",
        "product_delete_failed": "Lỗi khi xóa sản phẩm.",
        "confirm_delete_product": "Bạn có chắc muốn xóa sản phẩm này?",
        "category_name_required": "Tên danh mục không được để trống.",
        "category_added": "Thêm danh mục thành công!",
        "category_deleted": "Xóa danh mục thành công!",
        "category_save_failed": "Lỗi khi thêm danh mục.",
        "category_delete_failed": "Lỗi khi xóa danh mục.",
        "confirm_delete_category": "Bạn có chắc muốn xóa danh mục này?",
        "user_fields_required": "Vui lòng điền đầy đủ thông tin.",
        "cannot_delete_self": "Không thể xóa tài khoản của chính mình.",
        "confirm_delete_user": "Bạn có chắc muốn xóa người dùng này?",
        "user_added": "Thêm người dùng thành công!",
        "user_deleted": "Xóa người dùng thành công!",
        "user_save_failed": "Lỗi khi thêm người dùng.",
        "user_delete_failed": "Lỗi khi xóa người dùng.",
        "request_failed": "Yêu cầu thất bại.",
    },
}

_state = {"locale": DEFAULT_LOCALE}


def set_locale(locale: str) -> None:
    """Select the catalogue used by translate(); unknown locales fall back to English."""
    _state["locale"] = locale if locale in MESSAGES else DEFAULT_LOCALE


def translate(key: str, **kwargs: Any) -> str:
    """
    Look up a message and fill in its placeholders.

    Args:
        key: Message key
        **kwargs: Placeholder values

    Returns:
        The localized message; the key itself when no catalogue knows it
    """
    catalogue = MESSAGES.get(_state["locale"], MESSAGES[DEFAULT_LOCALE])
    template = catalogue.get(key) or MESSAGES[DEFAULT_LOCALE].get(key, key)
    return template.format(**kwargs) if kwargs else template


def format_amount(amount: Union[Decimal, int, float]) -> str:
    """Render a currency amount with thousands separators (150000 -> 150,000)."""
    value = Decimal(str(amount))
    if value == value.to_integral_value():
        return f"{value:,.0f}"
    return f"{value:,.2f}"
