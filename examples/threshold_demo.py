#!/usr/bin/env python3
"""
Example script demonstrating masked moment-preserving thresholding.
"""

import argparse
import numpy as np
import matplotlib.pyplot as plt
from moments_threshold import threshold_image
from moments_threshold.image_io import load_image


def create_mask(image_shape, margin=15):
    """Rectangular mask that leaves out a frame of ``margin`` pixels."""
    mask = np.zeros(image_shape, dtype=np.uint8)
    mask[margin:-margin, margin:-margin] = 255
    return mask


def visualize_results(image, mask, binary, threshold):
    """Show the input, the mask and the thresholded output."""
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))

    axes[0].imshow(image, cmap='gray')
    axes[0].set_title('Original Image')
    axes[0].axis('off')

    mask_vis = np.ma.masked_where(mask == 0, mask)
    axes[1].imshow(image, cmap='gray')
    axes[1].imshow(mask_vis, cmap='autumn', alpha=0.4)
    axes[1].set_title('Mask\n(pixels shaping the threshold)')
    axes[1].axis('off')

    axes[2].imshow(binary, cmap='gray')
    axes[2].set_title(f'Threshold {threshold}')
    axes[2].axis('off')

    plt.tight_layout()
    plt.show()


def main():
    parser = argparse.ArgumentParser(description='Test moment-preserving thresholding on an image')
    parser.add_argument('image_path', help='Path to the input image')
    parser.add_argument('--margin', type=int, default=15,
                        help='Frame left out of the mask (default: 15)')
    parser.add_argument('--bins', type=int, default=256,
                        help='Number of histogram bins (default: 256)')
    args = parser.parse_args()

    print("Loading image...")
    image = load_image(args.image_path)

    print("Creating mask...")
    mask = create_mask(image.shape, margin=args.margin)

    print("Running moment-preserving thresholding...")
    unmasked = threshold_image(image, bins=args.bins)
    result = threshold_image(image, mask, bins=args.bins)

    print("\nThreshold Statistics:")
    print(f"Image shape: {image.shape}, dtype: {image.dtype}")
    print(f"Threshold without mask: {unmasked.threshold}")
    print(f"Threshold with mask: {result.threshold}")
    sol = result.solution
    print(f"p0 = {sol.p0:.3f}, class means (bins) = {sol.mu0:.1f}, {sol.mu1:.1f}")
    for value in np.unique(result.output):
        count = np.sum(result.output == value)
        print(f"Value {value}: {count} pixels ({100 * count / result.output.size:.1f}%)")

    print("\nDisplaying visualization...")
    visualize_results(image, mask, result.output, result.threshold)


if __name__ == "__main__":
    main()
