"""Order status email content."""

from html import escape


def order_status_subject(order_id: str, status: str) -> str:
    return f"Order {order_id} - Status Update: {status}"


def render_order_status_email(
    customer_name: str,
    order_id: str,
    status: str,
    product_name: str | None = None,
) -> tuple[str, str]:
    """Build the subject and HTML body of an order status email.

    Returns:
        ``(subject, html)``
    """
    subject = order_status_subject(order_id, status)
    product_line = (
        f"<p><strong>Product:</strong> {escape(product_name)}</p>" if product_name else ""
    )
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 8px;">
      <h2 style="color: #4a4a4a;">{escape(subject)}</h2>
      <p>Dear {escape(customer_name)},</p>
      <p>Your order <strong>#{escape(order_id)}</strong> status has been updated to <strong>{escape(status)}</strong>.</p>
      {product_line}
      <p>Thank you for shopping with us!</p>
      <p style="margin-top: 30px; color: #888; font-size: 14px;">
        This is an automated message. Please do not reply directly to this email.
      </p>
    </div>
    """
    return subject, html
